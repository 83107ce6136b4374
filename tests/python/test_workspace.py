"""
Tests for the workspace query protocol.
"""

import logging

import pytest
import numpy as np

from lla import Config, ElementType
from lla._kernel.types import get_kernel, lapack_int
from lla._kernel.workspace import (
    QUERY_SIZE,
    WorkspacePhase,
    WorkspaceQuery,
    WorkspaceSpec,
    iwork,
    with_work_query,
)


def _reporting_body(reports, calls):
    """Body that behaves like a kernel: reports sizes when queried."""
    def body(ws):
        calls.append({slot.name: (slot.size, slot.buffer.size, ws.phase) for slot in ws})
        for slot in ws:
            if slot.size == QUERY_SIZE:
                slot.buffer[0] = reports[slot.name]
        return 'result'
    return body


class TestWithWorkQuery:
    """Test with_work_query."""

    def test_body_runs_twice(self):
        """Test the body is evaluated exactly twice."""
        calls = []
        result = with_work_query(_reporting_body({'work': 7}, calls), WorkspaceSpec('work'))
        assert result == 'result'
        assert len(calls) == 2

    def test_query_then_execute(self):
        """Test sizes seen by each call."""
        calls = []
        with_work_query(_reporting_body({'work': 7}, calls), WorkspaceSpec('work'))
        assert calls[0]['work'] == (QUERY_SIZE, 1, WorkspacePhase.QUERYING)
        assert calls[1]['work'] == (7, 7, WorkspacePhase.EXECUTING)

    def test_multiple_slots(self):
        """Test slots are sized independently."""
        calls = []
        specs = (
            WorkspaceSpec('work', ElementType.COMPLEX_DOUBLE),
            WorkspaceSpec('rwork', ElementType.DOUBLE),
            iwork(),
        )
        with_work_query(_reporting_body({'work': 10, 'rwork': 4, 'iwork': 3}, calls), *specs)
        assert calls[1]['work'][:2] == (10, 10)
        assert calls[1]['rwork'][:2] == (4, 4)
        assert calls[1]['iwork'][:2] == (3, 3)

    def test_slot_dtypes(self):
        """Test buffers have the requested dtypes."""
        seen = {}

        def body(ws):
            for slot in ws:
                seen[slot.name] = slot.buffer.dtype

        with_work_query(body, WorkspaceSpec('work', ElementType.COMPLEX_SINGLE), iwork())
        assert seen['work'] == np.complex64
        assert seen['iwork'] == lapack_int

    def test_complex_report(self):
        """Test sizes reported in a complex buffer use the real part."""
        calls = []
        spec = WorkspaceSpec('work', ElementType.COMPLEX_DOUBLE)
        with_work_query(_reporting_body({'work': 5 + 0j}, calls), spec)
        assert calls[1]['work'][:2] == (5, 5)

    def test_minimum_size(self):
        """Test a zero report still allocates one element."""
        calls = []
        with_work_query(_reporting_body({'work': 0}, calls), WorkspaceSpec('work'))
        assert calls[1]['work'][:2] == (1, 1)

    def test_logs_sizes(self, caplog):
        """Test negotiated sizes are logged at DEBUG."""
        with caplog.at_level(logging.DEBUG, logger="lla.workspace"):
            with_work_query(_reporting_body({'work': 12}, []), WorkspaceSpec('work'))
        assert any("12" in r.getMessage() for r in caplog.records)


class TestWorkspaceQuery:
    """Test the WorkspaceQuery state machine."""

    def test_released_after_success(self):
        """Test buffers are dropped when the scope exits."""
        with WorkspaceQuery(WorkspaceSpec('work')) as query:
            query.run(_reporting_body({'work': 3}, []))
            assert query['work'].buffer.size == 3
        assert query.phase is WorkspacePhase.RELEASED
        assert query['work'].buffer is None
        assert query.calls == 2

    def test_released_after_error(self):
        """Test buffers are dropped when the body raises."""
        def body(ws):
            if ws.phase is WorkspacePhase.EXECUTING:
                raise RuntimeError("kernel failed")
            ws['work'].buffer[0] = 4

        with pytest.raises(RuntimeError):
            with WorkspaceQuery(WorkspaceSpec('work')) as query:
                query.run(body)
        assert query.phase is WorkspacePhase.RELEASED
        assert query['work'].buffer is None

    def test_error_during_query(self):
        """Test an error in the query call stops before executing."""
        calls = []

        def body(ws):
            calls.append(ws.phase)
            raise ValueError("bad argument")

        with pytest.raises(ValueError):
            with_work_query(body, WorkspaceSpec('work'))
        assert calls == [WorkspacePhase.QUERYING]

    def test_run_once(self):
        """Test a query cannot be reused."""
        query = WorkspaceQuery(WorkspaceSpec('work'))
        query.run(_reporting_body({'work': 1}, []))
        with pytest.raises(RuntimeError):
            query.run(_reporting_body({'work': 1}, []))

    def test_duplicate_names(self):
        """Test slot names must be unique."""
        with pytest.raises(ValueError):
            WorkspaceQuery(WorkspaceSpec('work'), WorkspaceSpec('work'))

    def test_container_protocol(self):
        """Test slot lookup and iteration."""
        query = WorkspaceQuery(WorkspaceSpec('work'), iwork())
        assert len(query) == 2
        assert [slot.name for slot in query] == ['work', 'iwork']
        assert query.sizes() == {'work': QUERY_SIZE, 'iwork': QUERY_SIZE}


class TestWorkspaceWithKernel:
    """Test the protocol against a real LAPACK routine."""

    def test_dgels_query(self, requires_lapack):
        """Test dgels reports a size that is then allocated exactly."""
        kernel = get_kernel('gels', ElementType.DOUBLE, config=Config())
        a = np.asfortranarray([[1.0, 1.0], [1.0, 2.0], [1.0, 3.0]])
        b = np.array([1.0, 2.0, 2.0])
        sizes = []

        def body(ws):
            work = ws['work']
            sizes.append((work.size, work.buffer.size))
            kernel.invoke('N', 3, 2, 1, a, 3, b, 3, work.buffer, work.size)

        with_work_query(body, WorkspaceSpec('work', ElementType.DOUBLE))
        assert sizes[0] == (QUERY_SIZE, 1)
        size, length = sizes[1]
        assert size == length
        # LWORK >= max(1, MN + max(MN, NRHS)) with MN = min(M, N)
        assert size >= 4
        np.testing.assert_allclose(b[:2], np.linalg.lstsq(
            [[1, 1], [1, 2], [1, 3]], [1, 2, 2], rcond=None)[0])
