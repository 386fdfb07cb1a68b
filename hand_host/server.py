from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

import websockets
from websockets.asyncio.server import ServerConnection

from hand_engine.betting import BettingRound
from hand_engine.evaluator import evaluate_labels
from hand_engine.models import HandInput, Street, TableConfig
from hand_engine.record import build_record, encode_payload, record_to_dict
from hand_engine.table import positions_for
from hand_engine.validation import HandValidationError

LOGGER = logging.getLogger("hand_host")

# HandHost lets an entry UI query the engine over WebSockets. It keeps no
# hand state: every request carries the hand it is asking about.

Handler = Callable[[ServerConnection, Dict[str, Any]], Awaitable[None]]


class HandHost:
    def __init__(self, default_config: Optional[TableConfig] = None) -> None:
        self.default_config = default_config or TableConfig()
        self.handlers: Dict[str, Handler] = {
            "positions": self._handle_positions,
            "evaluate": self._handle_evaluate,
            "legal": self._handle_legal,
            "settle": self._handle_settle,
        }

    async def start(self, host: str = "0.0.0.0", port: int = 8766) -> None:
        async with websockets.serve(self._handle_connection, host, port):
            LOGGER.info("Hand host listening on %s:%s", host, port)
            await asyncio.Future()

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        LOGGER.info("Client connected")
        try:
            async for raw in websocket:
                await self.handle_message(websocket, self._decode(raw))
        except websockets.ConnectionClosed:
            pass
        LOGGER.info("Client disconnected")

    async def handle_message(self, websocket: ServerConnection, message: Dict[str, Any]) -> None:
        msg_type = message.get("type")
        handler = self.handlers.get(msg_type) if isinstance(msg_type, str) else None
        if handler is None:
            await self._send_error(websocket, code="UNKNOWN_TYPE", msg="Unsupported message type")
            return
        await handler(websocket, message)

    # Handlers ---------------------------------------------------------

    async def _handle_positions(self, websocket: ServerConnection, message: Dict[str, Any]) -> None:
        size = message.get("table_size", self.default_config.size)
        if not isinstance(size, int):
            await self._send_error(websocket, code="BAD_SCHEMA", msg="table_size must be an integer")
            return
        await self._send_json(websocket, "positions", {"table_size": size, "positions": list(positions_for(size))})

    async def _handle_evaluate(self, websocket: ServerConnection, message: Dict[str, Any]) -> None:
        cards = message.get("cards")
        if not isinstance(cards, list):
            await self._send_error(websocket, code="BAD_SCHEMA", msg="cards required")
            return
        evaluation = evaluate_labels(cards)
        if evaluation is None:
            await self._send_error(websocket, code="BAD_CARDS", msg="Need at least five valid cards")
            return
        await self._send_json(
            websocket,
            "evaluation",
            {
                "category": evaluation.category.name,
                "rank": int(evaluation.category),
                "description": evaluation.description,
                "cards": evaluation.labels,
                "tiebreakers": list(evaluation.tiebreakers),
            },
        )

    async def _handle_legal(self, websocket: ServerConnection, message: Dict[str, Any]) -> None:
        hand = await self._read_hand(websocket, message)
        if hand is None:
            return
        try:
            street = Street(message.get("street", Street.PREFLOP.value))
        except ValueError:
            await self._send_error(websocket, code="BAD_SCHEMA", msg="Unknown street")
            return

        betting = BettingRound.for_hand(hand, street)
        next_to_act = betting.next_to_act()
        requested = message.get("position")
        position = requested if isinstance(requested, str) and requested else next_to_act
        await self._send_json(
            websocket,
            "legal",
            {
                "street": street.value,
                "position": position,
                "next_to_act": next_to_act,
                "legal": [kind.value for kind in betting.legal_actions(position)],
                "call_amount": betting.call_amount(position) if position else 0,
                "call_total": betting.call_total(),
                "outstanding": betting.has_outstanding_bet(),
                "complete": betting.is_complete(),
            },
        )

    async def _handle_settle(self, websocket: ServerConnection, message: Dict[str, Any]) -> None:
        hand = await self._read_hand(websocket, message)
        if hand is None:
            return
        try:
            record = build_record(hand)
        except HandValidationError as exc:
            LOGGER.info("Rejected hand: %s", exc)
            await self._send_json(
                websocket,
                "error",
                {"code": "INVALID_HAND", "msg": "Invalid hand history", "issues": exc.issues},
            )
            return
        LOGGER.info(
            "Settled hand: pot=%s showdown=%s hero_pnl=%s",
            record.pot.amount,
            record.showdown,
            record.pot.hero_pnl,
        )
        await self._send_json(websocket, "record", {"record": record_to_dict(record)})

    # Helpers ----------------------------------------------------------

    async def _read_hand(self, websocket: ServerConnection, message: Dict[str, Any]) -> Optional[HandInput]:
        raw = message.get("hand")
        if not isinstance(raw, dict):
            await self._send_error(websocket, code="BAD_SCHEMA", msg="hand required")
            return None
        payload: Dict[str, Any] = {
            "table_size": self.default_config.size,
            "small_blind": self.default_config.small_blind,
            "big_blind": self.default_config.big_blind,
        }
        payload.update(raw)
        try:
            return HandInput.from_payload(payload)
        except (ValueError, TypeError) as exc:
            await self._send_error(websocket, code="BAD_SCHEMA", msg=str(exc))
            return None

    async def _send_json(self, websocket: ServerConnection, msg_type: str, payload: Dict[str, Any]) -> None:
        try:
            await websocket.send(self._envelope(msg_type, payload))
        except websockets.ConnectionClosed:
            pass

    async def _send_error(self, websocket: ServerConnection, code: str, msg: str) -> None:
        await self._send_json(websocket, "error", {"code": code, "msg": msg})

    def _envelope(self, msg_type: str, payload: Dict[str, Any]) -> str:
        body: Dict[str, Any] = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return encode_payload(body)

    def _decode(self, raw: Any) -> Dict[str, Any]:
        try:
            message = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            return {}
        return message if isinstance(message, dict) else {}
