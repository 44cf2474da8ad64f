"""Escape-sequence decoding.

The decoder is a small state machine fed one byte at a time. ``None`` stands
for a read that timed out, which is how a bare ESC press is told apart from
the start of a sequence.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable

from .constants import CSI_SIMPLE_MAP, CSI_TILDE_MAP, ESC, SS3_SIMPLE_MAP

log = logging.getLogger(__name__)


class Phase(enum.Enum):
    IDLE = "idle"
    ESCAPE = "escape"
    BRACKET = "bracket"
    BRACKET_DIGIT = "bracket-digit"
    SS3 = "ss3"


@dataclass(frozen=True, slots=True)
class DecodeState:
    phase: Phase = Phase.IDLE
    digit: int = 0


IDLE = DecodeState()


def _escape(state: DecodeState, byte: int | None) -> tuple[DecodeState, int]:
    log.debug("unrecognized sequence in %s: %r", state.phase.value, byte)
    return IDLE, ESC


def transition(state: DecodeState, byte: int | None) -> tuple[DecodeState, int | None]:
    """Advance the decoder by one input byte.

    Returns the next state and the decoded key, or ``None`` when more input
    is needed.
    """
    phase = state.phase
    if phase is Phase.IDLE:
        if byte is None:
            return IDLE, None
        if byte == ESC:
            return DecodeState(Phase.ESCAPE), None
        return IDLE, byte

    if byte is None:
        return IDLE, ESC

    if phase is Phase.ESCAPE:
        if byte == ord("["):
            return DecodeState(Phase.BRACKET), None
        if byte == ord("O"):
            return DecodeState(Phase.SS3), None
        return _escape(state, byte)

    if phase is Phase.BRACKET:
        if ord("0") <= byte <= ord("9"):
            return DecodeState(Phase.BRACKET_DIGIT, byte), None
        key = CSI_SIMPLE_MAP.get(byte)
        if key is None:
            return _escape(state, byte)
        return IDLE, key

    if phase is Phase.BRACKET_DIGIT:
        if byte == ord("~") and state.digit in CSI_TILDE_MAP:
            return IDLE, CSI_TILDE_MAP[state.digit]
        return _escape(state, byte)

    key = SS3_SIMPLE_MAP.get(byte)
    if key is None:
        return _escape(state, byte)
    return IDLE, key


def read_key(read_byte: Callable[[], int | None], block: bool = True) -> int | None:
    """Read exactly one logical key.

    ``read_byte`` returns the next input byte or ``None`` on timeout. With
    ``block`` false an idle timeout returns ``None`` instead of waiting.
    """
    state = IDLE
    while True:
        byte = read_byte()
        if byte is None and state.phase is Phase.IDLE and not block:
            return None
        state, key = transition(state, byte)
        if key is not None:
            return key
