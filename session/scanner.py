"""
Incremental key enumeration over standalone and cluster Redis clients.

Redis has no "list every key under a prefix" command, so the store walks
the key space with SCAN. The two client topologies use different cursor
protocols:

- Standalone (``redis.asyncio.Redis``): an integer cursor, starting at 0;
  the server hands back 0 again once the iteration is complete.
- Cluster (``redis.asyncio.cluster.RedisCluster``): every primary keeps its
  own cursor. They are tracked by :class:`ClusterScanCursor`, which reports
  completion through :meth:`ClusterScanCursor.is_finished` since no single
  integer can say "done" for the whole cluster.

The protocol is picked once per scan from the client's type. Running a
protocol against the other kind of client raises TopologyMismatchError.

SCAN is not atomic: keys written during a scan may or may not be seen and
a key may be returned more than once, so callers deduplicate the pages.
"""

import logging
from typing import Any, AsyncIterator, Mapping, Optional, Tuple, Union

from redis.asyncio.cluster import RedisCluster

from errors.exceptions import topology_mismatch
from session.keys import decode_value

logger = logging.getLogger(__name__)

# Cursor that starts a standalone scan and that the server returns when done
SCAN_COMPLETE = 0

Key = Union[str, bytes]


def is_cluster_client(client: Any) -> bool:
    """Tell whether ``client`` speaks the cluster scan protocol."""
    return isinstance(client, RedisCluster)


class ClusterScanCursor:
    """
    Scan position across every primary of a cluster.

    A fresh cursor has not contacted any node yet. After the first round
    trip it holds the cursor of each node that still has keys to return;
    nodes drop out as their own cursor comes back as 0.

    Instances are immutable; :meth:`advance` returns a new cursor.
    """

    __slots__ = ("_node_cursors", "_started")

    def __init__(self, node_cursors: Optional[Mapping[str, int]] = None):
        self._started = node_cursors is not None
        self._node_cursors = {
            name: int(cursor)
            for name, cursor in (node_cursors or {}).items()
            if int(cursor) != SCAN_COMPLETE
        }

    @property
    def started(self) -> bool:
        return self._started

    @property
    def pending_nodes(self) -> Tuple[str, ...]:
        """Names of the nodes whose scan is not complete yet."""
        return tuple(self._node_cursors)

    def is_finished(self) -> bool:
        return self._started and not self._node_cursors

    def next_node(self) -> Tuple[str, int]:
        """Return the node to scan next and its cursor."""
        if not self._node_cursors:
            raise ValueError("No node left to scan")
        return next(iter(self._node_cursors.items()))

    def advance(self, node_name: str, node_cursor: int) -> "ClusterScanCursor":
        """Return a cursor with ``node_name`` moved to ``node_cursor``."""
        node_cursors = dict(self._node_cursors)
        node_cursors[node_name] = node_cursor
        return ClusterScanCursor(node_cursors)

    def __repr__(self) -> str:
        return (
            f"ClusterScanCursor(started={self._started}, "
            f"pending={self._node_cursors!r})"
        )


async def scan_standalone_keys(
    client: Any,
    match: str,
    count: int,
) -> AsyncIterator[list[Key]]:
    """
    Yield pages of keys matching ``match`` from a standalone client.

    Args:
        client: A standalone ``redis.asyncio.Redis`` client.
        match: Glob pattern passed to SCAN MATCH.
        count: Hint for the number of keys per round trip.

    Raises:
        TopologyMismatchError: If ``client`` is a cluster client.
    """
    if is_cluster_client(client):
        raise topology_mismatch("standalone", "cluster")

    cursor = SCAN_COMPLETE
    while True:
        cursor, keys = await client.scan(cursor=cursor, match=match, count=count)
        if keys:
            logger.debug("Scanned page", extra={
                "extra_data": {"match": match, "page_size": len(keys)}
            })
            yield keys
        if int(cursor) == SCAN_COMPLETE:
            break


async def _scan_cluster_page(
    client: Any,
    cursor: ClusterScanCursor,
    match: str,
    count: int,
) -> Tuple[ClusterScanCursor, list[Key]]:
    """Perform one SCAN round trip and return the next cursor with its keys."""
    if not cursor.started:
        # No target: the cluster client fans the first call out to every primary
        node_cursors, keys = await client.scan(
            cursor=SCAN_COMPLETE, match=match, count=count
        )
        return ClusterScanCursor(node_cursors), keys

    node_name, node_cursor = cursor.next_node()
    node = client.get_node(node_name=node_name)
    if node is None:
        logger.warning("Cluster node left during scan", extra={
            "extra_data": {"node": node_name}
        })
        return cursor.advance(node_name, SCAN_COMPLETE), []

    node_cursors, keys = await client.scan(
        cursor=node_cursor, match=match, count=count, target_nodes=node
    )
    return cursor.advance(node_name, node_cursors.get(node_name, SCAN_COMPLETE)), keys


async def scan_cluster_keys(
    client: Any,
    match: str,
    count: int,
) -> AsyncIterator[list[Key]]:
    """
    Yield pages of keys matching ``match`` from every primary of a cluster.

    Args:
        client: A ``redis.asyncio.cluster.RedisCluster`` client.
        match: Glob pattern passed to SCAN MATCH.
        count: Hint for the number of keys per round trip and node.

    Raises:
        TopologyMismatchError: If ``client`` is a standalone client.
    """
    if not is_cluster_client(client):
        raise topology_mismatch("cluster", "standalone")

    cursor = ClusterScanCursor()
    while not cursor.is_finished():
        cursor, keys = await _scan_cluster_page(client, cursor, match, count)
        if keys:
            logger.debug("Scanned cluster page", extra={
                "extra_data": {
                    "match": match,
                    "page_size": len(keys),
                    "pending_nodes": len(cursor.pending_nodes),
                }
            })
            yield keys


def scan_keys(client: Any, match: str, count: int) -> AsyncIterator[list[Key]]:
    """Yield pages of matching keys using the protocol of the client's topology."""
    if is_cluster_client(client):
        return scan_cluster_keys(client, match, count)
    return scan_standalone_keys(client, match, count)


async def collect_keys(client: Any, match: str, count: int) -> list[str]:
    """
    Gather every unique key matching ``match``.

    Pages are merged into a set because SCAN may return a key more than
    once while the key space changes underneath it.

    Returns:
        The matching keys as text, in no particular order.
    """
    keys: set[str] = set()
    async for page in scan_keys(client, match, count):
        keys.update(decode_value(key) for key in page)
    return list(keys)
