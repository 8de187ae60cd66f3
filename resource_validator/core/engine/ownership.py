"""
Ownership resolver — walk owner references against an allowlist.

A resource is allowed if its own identity is listed, or if any
resource reachable by repeatedly following owner references is listed.
Owner references carry no namespace, so every hop inherits the
namespace of the child.

Only resources inside the snapshot are visible: an owner that is not
in the snapshot can still match the allowlist by identity, but its own
owners are unknown and the walk stops there.

The walk keeps a visited set of identities, so malformed data with
cyclic owner references terminates instead of looping forever.
"""

from __future__ import annotations

import logging
from typing import Iterable

from resource_validator.core.models.resource import Resource, ResourceIdentity

logger = logging.getLogger(__name__)


class OwnershipResolver:
    """Owner-chain lookups over one immutable snapshot."""

    def __init__(self, resources: Iterable[Resource]):
        self._index: dict[ResourceIdentity, Resource] = {}
        for resource in resources:
            # First occurrence wins; identities are unique within a snapshot.
            self._index.setdefault(resource.identity, resource)

    def owners_of(self, identity: ResourceIdentity) -> list[ResourceIdentity]:
        """Identities of the direct owners of a snapshot resource."""
        resource = self._index.get(identity)
        if resource is None:
            return []
        return [
            ResourceIdentity(ref.kind, ref.name, identity.namespace)
            for ref in resource.owner_references
        ]

    def is_allowed(
        self,
        target: Resource,
        allowlist: set[ResourceIdentity] | frozenset[ResourceIdentity],
    ) -> bool:
        """Whether ``target`` or any of its ancestors is in ``allowlist``."""
        return self.find_allowed_ancestor(target, allowlist) is not None

    def find_allowed_ancestor(
        self,
        target: Resource,
        allowlist: set[ResourceIdentity] | frozenset[ResourceIdentity],
    ) -> ResourceIdentity | None:
        """Return the first listed identity on the owner chain, or None.

        Depth-first, owner references in declaration order.
        """
        start = target.identity
        if start in allowlist:
            return start

        visited: set[ResourceIdentity] = {start}
        # The target's own references are used even if it is not indexed.
        stack = [
            ResourceIdentity(ref.kind, ref.name, start.namespace)
            for ref in reversed(target.owner_references)
        ]

        while stack:
            current = stack.pop()
            if current in visited:
                logger.debug("Owner cycle at %s/%s (%s)", current.namespace, current.name, current.kind)
                continue
            visited.add(current)

            if current in allowlist:
                return current

            stack.extend(reversed(self.owners_of(current)))

        return None
