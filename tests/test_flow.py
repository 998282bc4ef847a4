"""Tests for sequence/ack correlation and response reading."""

from __future__ import annotations

import asyncio

import pytest

from lifxlan.protocol.frame import MalformedMessageError, MessageTooShortError
from lifxlan.protocol.protocol import MessageType
from lifxlan.protocol.structures import StateUnhandledPayload
from lifxlan.services.flow import (
    UnhandledMessageError,
    WaitForAcksError,
    read_next_response,
    read_response,
    wait_for_acks,
)

from tests.mocks import FakeConnection, make_ack, make_message

SOURCE = 0x1234
READ_TIMEOUT = 0.01


def test_wait_for_acks_reports_partial_progress() -> None:
    async def _run() -> None:
        conn = FakeConnection([make_ack(SOURCE, 1), make_ack(SOURCE, 3)])
        with pytest.raises(WaitForAcksError) as excinfo:
            await wait_for_acks(conn, SOURCE, [1, 2, 3], timeout=0.1, read_timeout=READ_TIMEOUT)

        error = excinfo.value
        assert set(error.received) == {1, 3}
        assert set(error.total) == {1, 2, 3}
        assert isinstance(error.cause, TimeoutError)
        assert str(error).startswith("2 of 3 ack(s) received")

    asyncio.run(_run())


def test_wait_for_acks_ignores_foreign_datagrams() -> None:
    async def _run() -> None:
        conn = FakeConnection(
            [
                make_ack(SOURCE, 6),
                make_ack(SOURCE + 1, 5),
                make_message(MessageType.STATE_LABEL, source=SOURCE, sequence=5, payload=b"\x00" * 32),
            ]
        )
        with pytest.raises(WaitForAcksError) as excinfo:
            await wait_for_acks(conn, SOURCE, {5}, timeout=0.1, read_timeout=READ_TIMEOUT)
        assert excinfo.value.received == ()
        assert excinfo.value.total == (5,)

    asyncio.run(_run())


def test_wait_for_acks_returns_once_all_seen() -> None:
    async def _run() -> None:
        conn = FakeConnection([make_ack(SOURCE, 2), make_ack(SOURCE, 2), make_ack(SOURCE, 1)])
        await wait_for_acks(conn, SOURCE, [1, 2], timeout=1.0, read_timeout=READ_TIMEOUT)
        assert not conn.reads

    asyncio.run(_run())


def test_wait_for_acks_empty_set_returns_immediately() -> None:
    async def _run() -> None:
        conn = FakeConnection()
        await wait_for_acks(conn, SOURCE, [], timeout=0)

    asyncio.run(_run())


def test_wait_for_acks_wraps_socket_and_parse_errors() -> None:
    async def _run() -> None:
        conn = FakeConnection([make_ack(SOURCE, 1), ConnectionRefusedError("refused")])
        with pytest.raises(WaitForAcksError) as excinfo:
            await wait_for_acks(conn, SOURCE, [1, 2], read_timeout=READ_TIMEOUT)
        assert excinfo.value.received == (1,)
        assert isinstance(excinfo.value.cause, ConnectionRefusedError)

        conn = FakeConnection([b"\x00" * 4])
        with pytest.raises(WaitForAcksError) as excinfo:
            await wait_for_acks(conn, SOURCE, [1], read_timeout=READ_TIMEOUT)
        assert isinstance(excinfo.value.cause, MessageTooShortError)

    asyncio.run(_run())


def test_wait_for_acks_cancellation_propagates() -> None:
    async def _run() -> None:
        conn = FakeConnection()
        task = asyncio.create_task(wait_for_acks(conn, SOURCE, [1], read_timeout=READ_TIMEOUT))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(_run())


def test_wait_for_acks_outer_timeout_is_not_wrapped() -> None:
    async def _run() -> None:
        conn = FakeConnection()
        with pytest.raises(TimeoutError):
            async with asyncio.timeout(0.05):
                await wait_for_acks(conn, SOURCE, [1], read_timeout=READ_TIMEOUT)

    asyncio.run(_run())


def test_read_next_response_returns_first_message() -> None:
    async def _run() -> None:
        conn = FakeConnection([make_ack(SOURCE + 1, 9), make_ack(SOURCE, 1)])
        response = await read_next_response(conn, read_timeout=READ_TIMEOUT)
        assert response.source == SOURCE + 1
        assert response.sequence == 9

    asyncio.run(_run())


def test_read_next_response_raises_malformed() -> None:
    async def _run() -> None:
        conn = FakeConnection([b"\x01" * 40])
        with pytest.raises(MalformedMessageError):
            await read_next_response(conn, read_timeout=READ_TIMEOUT)

    asyncio.run(_run())


def test_read_next_response_timeout() -> None:
    async def _run() -> None:
        with pytest.raises(TimeoutError):
            await read_next_response(FakeConnection(), timeout=0.05, read_timeout=READ_TIMEOUT)

    asyncio.run(_run())


def test_read_response_filters_by_sequence_and_type() -> None:
    async def _run() -> None:
        label = b"kitchen".ljust(32, b"\x00")
        conn = FakeConnection(
            [
                make_message(MessageType.STATE_LABEL, source=SOURCE, sequence=3, payload=label),
                make_ack(SOURCE, 4),
                make_message(MessageType.STATE_LABEL, source=SOURCE, sequence=4, payload=label),
            ]
        )
        response = await read_response(
            conn,
            source=SOURCE,
            sequence=4,
            message_types=(MessageType.STATE_LABEL,),
            read_timeout=READ_TIMEOUT,
        )
        assert response.sequence == 4
        assert response.payload == label

    asyncio.run(_run())


def test_read_response_raises_unhandled() -> None:
    async def _run() -> None:
        payload = StateUnhandledPayload(unhandled_type=MessageType.GET_DEVICE_CHAIN).encode()
        conn = FakeConnection([make_message(MessageType.STATE_UNHANDLED, source=SOURCE, sequence=2, payload=payload)])
        with pytest.raises(UnhandledMessageError) as excinfo:
            await read_response(
                conn,
                source=SOURCE,
                sequence=2,
                message_types=(MessageType.STATE_DEVICE_CHAIN,),
                read_timeout=READ_TIMEOUT,
            )
        assert excinfo.value.message_type == MessageType.GET_DEVICE_CHAIN

    asyncio.run(_run())
