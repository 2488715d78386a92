"""
Game phase transitions.

SETUP -> SELECT_SECRET -> PLAYING, with soft reset (PLAYING -> SELECT_SECRET)
and a confirmed hard reset (PLAYING -> SETUP) as the only ways back.

Every function takes a GameState and returns a GameState. A transition that
does not apply in the current phase returns the input unchanged.
"""
from __future__ import annotations

from . import registry
from .schemas import GamePhase, GameState

HARD_RESET = "hard_reset"


def finish_setup(state: GameState) -> GameState:
    if state.phase != GamePhase.SETUP or not state.characters:
        return state
    return state.model_copy(update={"phase": GamePhase.SELECT_SECRET, "secret_character_id": None})


def click_card(state: GameState, character_id: str) -> GameState:
    if registry.find(state.characters, character_id) is None:
        return state

    if state.phase == GamePhase.SELECT_SECRET:
        # last click wins
        return state.model_copy(update={"secret_character_id": character_id})

    if state.phase == GamePhase.PLAYING:
        return state.model_copy(update={"characters": registry.toggle_eliminated(state.characters, character_id)})

    return state


def confirm_secret(state: GameState) -> GameState:
    if state.phase != GamePhase.SELECT_SECRET or state.secret_character_id is None:
        return state
    return state.model_copy(update={"phase": GamePhase.PLAYING})


def soft_reset(state: GameState) -> GameState:
    if state.phase != GamePhase.PLAYING:
        return state
    return state.model_copy(
        update={
            "phase": GamePhase.SELECT_SECRET,
            "characters": registry.reset_eliminations(state.characters),
            "secret_character_id": None,
            "pending_confirmation": None,
        }
    )


def request_hard_reset(state: GameState) -> GameState:
    if state.phase != GamePhase.PLAYING:
        return state
    return state.model_copy(update={"pending_confirmation": HARD_RESET})


def cancel_hard_reset(state: GameState) -> GameState:
    if state.pending_confirmation != HARD_RESET:
        return state
    return state.model_copy(update={"pending_confirmation": None})


def confirm_hard_reset(state: GameState) -> GameState:
    if state.phase != GamePhase.PLAYING or state.pending_confirmation != HARD_RESET:
        return state
    return GameState(phase=GamePhase.SETUP)
