import logging
import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from chon.db import models
from chon.db.models.players import OTP_PURPOSES

logger = logging.getLogger(__name__)


class OtpService:
    """One-time codes for player login, registration and verification."""

    def __init__(self, db: Session):
        self.db = db

    def generate(
        self,
        player: models.Player,
        purpose: str = "login",
        length: int = 6,
        expiry_minutes: int = 10,
    ) -> models.PlayerOtp:
        if purpose not in OTP_PURPOSES:
            raise ValueError(f"Unknown OTP purpose: {purpose}")
        code = "".join(str(secrets.randbelow(10)) for _ in range(length))

        # a new code replaces every pending one for the same purpose
        (
            self.db.query(models.PlayerOtp)
            .filter(
                models.PlayerOtp.player_id == player.id,
                models.PlayerOtp.purpose == purpose,
                models.PlayerOtp.is_verified.is_(False),
            )
            .delete(synchronize_session="fetch")
        )
        otp = models.PlayerOtp(
            player_id=player.id,
            otp_code=code,
            purpose=purpose,
            expires_at=models.now_utc() + timedelta(minutes=expiry_minutes),
        )
        self.db.add(otp)
        self.db.commit()
        self.db.refresh(otp)
        logger.info("otp_generated: player_id=%s purpose=%s", player.id, purpose)
        return otp

    def verify(self, player: models.Player, code: str, purpose: str = "login") -> bool:
        otp: Optional[models.PlayerOtp] = (
            self.db.query(models.PlayerOtp)
            .filter(
                models.PlayerOtp.player_id == player.id,
                models.PlayerOtp.otp_code == code,
                models.PlayerOtp.purpose == purpose,
                models.PlayerOtp.is_verified.is_(False),
                models.PlayerOtp.expires_at > models.now_utc(),
            )
            .first()
        )
        if otp is None:
            logger.info("otp_rejected: player_id=%s purpose=%s", player.id, purpose)
            return False
        otp.is_verified = True
        self.db.commit()
        return True
