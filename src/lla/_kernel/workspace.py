"""Workspace query protocol.

Many LAPACK routines take scratch arrays whose optimal length depends on the
routine and its inputs. The length is obtained by calling the routine itself
with the length argument set to -1: the routine then only writes the optimal
length into the first element of the scratch array and returns.

with_work_query() runs a body through both calls:

    QUERYING    every slot has size -1 and a one-element buffer; body runs
    SIZING      each slot's size is read from buffer[0]; a buffer of exactly
                that many elements is allocated
    EXECUTING   body runs again with the real buffers; its result is returned
    RELEASED    buffers are dropped (also when the body raised)

The body is evaluated exactly twice, so anything it does besides calling the
kernel must be idempotent. Several slots (WORK, RWORK, IWORK, ...) go through
the phases together.

Example:
    >>> def body(ws):
    ...     kernel.invoke('N', m, n, nrhs, a, lda, b, ldb,
    ...                   ws['work'].buffer, ws['work'].size)
    >>> with_work_query(body, WorkspaceSpec('work', ElementType.DOUBLE))
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar

import numpy as np

from .._dtypes import ElementType
from .types import lapack_int


__all__ = [
    'QUERY_SIZE',
    'WorkspaceSpec',
    'WorkspaceSlot',
    'WorkspacePhase',
    'WorkspaceQuery',
    'with_work_query',
    'iwork',
]

logger = logging.getLogger("lla.workspace")

# Length argument requesting a size query
QUERY_SIZE = -1

T = TypeVar('T')


@dataclass(frozen=True)
class WorkspaceSpec:
    """Scratch array required by a kernel.

    Attributes:
        name: Key under which the body finds the slot.
        dtype: ElementType, or any NumPy dtype (lapack_int for IWORK).
    """
    name: str
    dtype: Any = ElementType.DOUBLE

    @property
    def numpy_dtype(self) -> np.dtype:
        if isinstance(self.dtype, ElementType):
            return self.dtype.numpy_dtype
        return np.dtype(self.dtype)


class WorkspaceSlot:
    """Length argument and buffer handed to the body for one scratch array.

    Attributes:
        name: Slot key.
        size: Length to pass to the kernel (QUERY_SIZE while querying).
        buffer: Scratch array of ``size`` elements (one element while querying).
    """

    __slots__ = ('name', 'dtype', 'size', 'buffer')

    def __init__(self, spec: WorkspaceSpec):
        self.name = spec.name
        self.dtype = spec.numpy_dtype
        self.size = QUERY_SIZE
        self.buffer: Optional[np.ndarray] = np.zeros(1, dtype=self.dtype)

    def reported_size(self) -> int:
        """Length the kernel wrote into buffer[0] during the query (at least 1)."""
        value = self.buffer[0]
        if np.iscomplexobj(value):
            value = value.real
        return max(1, int(value))

    def allocate(self, size: int) -> None:
        self.size = size
        self.buffer = np.zeros(size, dtype=self.dtype)

    def release(self) -> None:
        self.buffer = None

    def __repr__(self) -> str:
        return f"WorkspaceSlot({self.name!r}, size={self.size}, dtype={self.dtype})"


class WorkspacePhase(Enum):
    QUERYING = 'querying'
    SIZING = 'sizing'
    EXECUTING = 'executing'
    RELEASED = 'released'


class WorkspaceQuery:
    """Two-phase workspace negotiation for one kernel invocation.

    Use as a context manager so the buffers are released on every exit path:

        >>> with WorkspaceQuery(WorkspaceSpec('work', ElementType.DOUBLE)) as query:
        ...     result = query.run(body)
    """

    def __init__(self, *specs: WorkspaceSpec):
        names = [spec.name for spec in specs]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate workspace names: {names}")
        self._slots: Dict[str, WorkspaceSlot] = {spec.name: WorkspaceSlot(spec) for spec in specs}
        self.phase = WorkspacePhase.QUERYING
        self.calls = 0

    def __getitem__(self, name: str) -> WorkspaceSlot:
        return self._slots[name]

    def __iter__(self) -> Iterator[WorkspaceSlot]:
        return iter(self._slots.values())

    def __len__(self) -> int:
        return len(self._slots)

    def sizes(self) -> Dict[str, int]:
        return {name: slot.size for name, slot in self._slots.items()}

    def _call(self, body: Callable[['WorkspaceQuery'], T]) -> T:
        self.calls += 1
        return body(self)

    def run(self, body: Callable[['WorkspaceQuery'], T]) -> T:
        """Query, size, then execute ``body``; returns the result of the second call."""
        if self.phase is not WorkspacePhase.QUERYING:
            raise RuntimeError(f"Workspace query already {self.phase.value}")

        self._call(body)

        self.phase = WorkspacePhase.SIZING
        for slot in self:
            slot.allocate(slot.reported_size())
        logger.debug("Workspace sizes: %s", self.sizes())

        self.phase = WorkspacePhase.EXECUTING
        return self._call(body)

    def release(self) -> None:
        for slot in self:
            slot.release()
        self.phase = WorkspacePhase.RELEASED

    def __enter__(self) -> 'WorkspaceQuery':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()


def with_work_query(body: Callable[[WorkspaceQuery], T], *specs: WorkspaceSpec) -> T:
    """Run ``body`` through the workspace query protocol.

    Args:
        body: Callable receiving the WorkspaceQuery; looks up slots by name
            and passes ``slot.buffer`` / ``slot.size`` to the kernel.
        *specs: Scratch arrays to negotiate.

    Returns:
        Result of the executing call.
    """
    with WorkspaceQuery(*specs) as query:
        return query.run(body)


def iwork(name: str = 'iwork') -> WorkspaceSpec:
    """Spec for an INTEGER scratch array (IWORK) sized by the query."""
    return WorkspaceSpec(name, lapack_int)
