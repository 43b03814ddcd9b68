from __future__ import annotations

from dataclasses import dataclass

import httpx

from islanders.config import Settings
from islanders.core.schemas import Booking


@dataclass
class TelegramOwnerNotifier:
    """Lightweight Telegram sender that alerts a listing owner about viewing requests."""

    bot_token: str
    chat_id: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "TelegramOwnerNotifier | None":
        token = (settings.telegram_bot_token or "").strip()
        chat_id = (settings.telegram_chat_id or "").strip()
        if not token or not chat_id:
            return None
        return cls(bot_token=token, chat_id=chat_id)

    async def send_viewing_request(self, booking: Booking) -> dict:
        url = f"https://api.telegram.org/bot{self.bot_token}/sendMessage"

        safe_notes = (booking.special_requests or "").strip()
        if len(safe_notes) > 1200:
            safe_notes = safe_notes[:1200] + "…"

        lines = [
            f"🏡 New viewing request for \"{booking.item_title}\"",
            f"Client: {booking.customer_name}",
            f"Contact: {booking.customer_contact or 'n/a'}",
            f"Slot: {booking.viewing_time or 'Flexible'}",
        ]
        if safe_notes:
            lines.append(f"Notes: {safe_notes}")
        lines.append(f"Ref: {booking.id}")

        payload: dict = {
            "chat_id": self.chat_id,
            "text": "\n".join(lines),
            "disable_web_page_preview": True,
        }

        try:
            async with httpx.AsyncClient(timeout=15.0) as client:
                resp = await client.post(url, json=payload)
                data = resp.json()

            if resp.status_code == 200 and data.get("ok"):
                result = data.get("result") or {}
                return {"success": True, "message_id": result.get("message_id")}

            return {
                "success": False,
                "error": data.get("description") or f"telegram_http_{resp.status_code}",
            }
        except Exception as e:
            return {"success": False, "error": str(e)}
