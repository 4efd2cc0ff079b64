"""Headline numbers for the admin dashboard."""
from typing import Any, Dict

from sqlalchemy.orm import Session

from chon.db import models, schemas
from chon.db.repositories import app_versions as app_version_repo
from chon.db.repositories import competitions as competition_repo
from chon.db.repositories import players as player_repo
from chon.db.repositories import wallets as wallet_repo


def dashboard_stats(db: Session) -> Dict[str, Any]:
    top = player_repo.top_player(db)
    versions = app_version_repo.version_statistics(db)
    for key in ("latest_ios", "latest_android"):
        row = versions[key]
        versions[key] = schemas.AppVersion.model_validate(row).model_dump(mode="json") if row else None

    return {
        "total_competitions": db.query(models.Competition).count(),
        "active_competitions": competition_repo.status_counts(db)["active"],
        "total_players": db.query(models.Player).count(),
        "total_questions": db.query(models.Question).count(),
        "total_entry_fees": str(wallet_repo.total_completed_entry_fees(db)),
        "top_player": {"nickname": top.nickname, "total_score": top.total_score} if top else None,
        "app_versions": versions,
    }
