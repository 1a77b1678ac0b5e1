"""Game API endpoints."""

import logging
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, HTTPException, Header

from api.schemas import (
    ActionRequest,
    BetRequest,
    CardResponse,
    GameStateResponse,
    HandResponse,
    HandResultResponse,
    NewGameRequest,
    NewGameResponse,
    RoundResultResponse,
    RulesRequest,
    SuggestionResponse,
)
from api.session import create_session, get_session, update_session
from blackjack.cards import Card, card_value
from blackjack.hand import HandValue, format_hand_value, hand_value
from blackjack.game import BlackjackTable, InvalidUseError, settle
from blackjack.game.actions import dealer_hand_value, player_hand_value
from config import config

logger = logging.getLogger(__name__)

router = APIRouter()


def _card_response(card: Card) -> CardResponse:
    if card.face_down:
        return CardResponse(rank=None, suit=None, value=0, face_down=True)
    return CardResponse(rank=str(card.rank), suit=str(card.suit), value=card_value(card))


def _hand_response(cards, value: HandValue, bet: Decimal | None = None) -> HandResponse:
    return HandResponse(
        cards=[_card_response(c) for c in cards],
        value=format_hand_value(value),
        is_soft=value.is_soft,
        is_blackjack=value.is_blackjack,
        is_busted=value.is_bust,
        bet=float(bet) if bet is not None else None,
    )


def _game_state_response(table: BlackjackTable) -> GameStateResponse:
    """Convert table state to response."""
    state = table.round
    if state is None:
        return GameStateResponse(
            phase="waiting-for-bet",
            player_hands=[],
            actionable_hand_index=0,
            dealer_hand=_hand_response((), hand_value(())),
            dealer_showing=None,
            bankroll=float(table.bankroll),
            legal_actions=[],
            cards_remaining=0,
        )

    return GameStateResponse(
        phase=str(state.phase),
        player_hands=[
            _hand_response(hand, player_hand_value(state, i), state.bets[i])
            for i, hand in enumerate(state.player_hands)
        ],
        actionable_hand_index=state.actionable_hand_index,
        dealer_hand=_hand_response(state.dealer_hand, dealer_hand_value(state)),
        dealer_showing=_card_response(state.dealer_upcard) if state.dealer_hand else None,
        bankroll=float(table.bankroll),
        legal_actions=[str(a) for a in table.legal_actions()],
        cards_remaining=state.shoe.cards_remaining,
    )


async def _get_table(session_id: str) -> BlackjackTable:
    """Look up the table of a session."""
    table = await get_session(session_id)
    if table is None:
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return table


def _reject(exc: Exception, operation: str) -> HTTPException:
    """Log a refused request and turn it into a 400."""
    logger.warning("Rejected %s: %s", operation, exc)
    return HTTPException(status_code=400, detail=str(exc))


@router.post("/new")
async def new_game(
    request: NewGameRequest | None = None,
    session_id: Annotated[str | None, Header(alias="X-Session-ID")] = None,
) -> NewGameResponse:
    """Open a table, replacing the session's table if the session is still valid."""
    request = request or NewGameRequest()
    try:
        rules = request.rules.to_ruleset() if request.rules else config.game.ruleset()
    except ValueError as exc:
        raise _reject(exc, "rules") from exc

    bankroll = Decimal(str(request.bankroll)) if request.bankroll else config.game.starting_bankroll
    table = BlackjackTable(
        rules=rules,
        initial_bankroll=bankroll,
        min_bet=config.game.min_bet,
        max_bet=config.game.max_bet,
    )

    if session_id is None or await get_session(session_id) is None:
        session_id = await create_session(table)
    else:
        await update_session(session_id, table)
    logger.info("New table with %d decks, bankroll %s", rules.num_decks, bankroll)

    return NewGameResponse(
        session_id=session_id,
        bankroll=float(bankroll),
        rules=RulesRequest.from_ruleset(rules),
    )


@router.get("/state")
async def get_state(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Get current table state."""
    table = await _get_table(session_id)
    return _game_state_response(table)


@router.post("/bet")
async def place_bet(
    request: BetRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Place a bet and deal until the player must decide or the round ends."""
    table = await _get_table(session_id)
    try:
        table.bet(request.amount)
        table.auto_advance()
    except (InvalidUseError, ValueError) as exc:
        raise _reject(exc, "bet") from exc

    await update_session(session_id, table)
    return _game_state_response(table)


@router.post("/action")
async def player_action(
    request: ActionRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Execute a player action."""
    table = await _get_table(session_id)
    try:
        table.act(request.action)
    except (InvalidUseError, ValueError) as exc:
        raise _reject(exc, f"action '{request.action}'") from exc

    await update_session(session_id, table)
    return _game_state_response(table)


@router.get("/suggest")
async def suggest_action(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> SuggestionResponse:
    """Basic strategy advice for the actionable hand."""
    table = await _get_table(session_id)
    try:
        action = table.suggest()
    except InvalidUseError as exc:
        raise _reject(exc, "suggestion") from exc

    return SuggestionResponse(
        action=str(action),
        legal_actions=[str(a) for a in table.legal_actions()],
    )


@router.get("/result")
async def round_result(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> RoundResultResponse:
    """Outcome and payout of every hand of the finished round."""
    table = await _get_table(session_id)
    try:
        outcomes = table.outcomes()
    except InvalidUseError as exc:
        raise _reject(exc, "result") from exc

    state = table.round
    payouts = settle(state)
    return RoundResultResponse(
        hands=[
            HandResultResponse(
                hand_index=i,
                result=str(outcome.result),
                reason=str(outcome.reason) if outcome.reason else None,
                bet=float(bet),
                payout=float(paid),
            )
            for i, (outcome, bet, paid) in enumerate(zip(outcomes, state.bets, payouts))
        ],
        net=float(sum(payouts, Decimal("0")) - state.total_wagered),
        bankroll=float(table.bankroll),
    )
