"""Tests for the untrusted-source confirmation gate."""

from mirror_commander.core.confirmation import UNTRUSTED_SOURCE_MESSAGE, ConfirmationGate


def test_pending_by_default():
    gate = ConfirmationGate()
    assert not gate.resolved
    assert gate.decision is None
    assert gate.message == UNTRUSTED_SOURCE_MESSAGE


def test_confirm_once():
    gate = ConfirmationGate()
    assert gate.confirm() is True
    assert gate.confirm() is False
    assert gate.decision is True


def test_first_resolution_wins():
    gate = ConfirmationGate("continue?")
    assert gate.cancel() is True
    assert gate.confirm() is False
    assert gate.resolved
    assert gate.decision is False
