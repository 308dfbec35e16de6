"""
Seed script for Spot Hazard Hub.

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to configured store: python scripts/seed_db.py --apply
  - Force the in-memory store (useful to preview outcomes): python scripts/seed_db.py --apply --backend memory

Behavior:
  - Loads `db_seed.json` from repo root.
  - Replays every entry through HazardService so dedupe, auto-confirmation,
    proposals and danger levels come out exactly as in production.

Seed format:
  {"commands": [
      {"op": "report", "actor": "u1", "spot_id": "s1", "reason": "theft", "details": "..."},
      {"op": "confirm", "actor": "u4", "spot_id": "s1"},
      {"op": "vote", "actor": "u6", "spot_id": "s1", "choice": "approve"}
  ]}
"""

import argparse
import json
import os

from hazardhub.core.settings import settings
from hazardhub.services.hazard_service import HazardService
from hazardhub.storage.registry import create_store


def load_seed(path: str = "./db_seed.json") -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def apply_command(service: HazardService, command: dict):
    op = command.get("op")
    actor = command.get("actor", "seed")
    spot_id = command.get("spot_id")

    if op == "report":
        return service.report_alert(spot_id, actor, command.get("reason"), command.get("details", ""))
    if op == "confirm":
        return service.confirm_alert(spot_id, actor, command.get("alert_id"))
    if op == "vote":
        proposal = service.get_deletion_proposal(spot_id)
        proposal_id = command.get("proposal_id") or (proposal.id if proposal else None)
        return service.vote_on_proposal(proposal_id, actor, command.get("choice"))
    raise ValueError(f"Unknown seed op '{op}'")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Replay the seed instead of dry-run")
    parser.add_argument("--backend", default=None, help="Override STORAGE_BACKEND (memory, json, firestore)")
    args = parser.parse_args()

    seed_path = os.path.join(os.getcwd(), "db_seed.json")
    if not os.path.exists(seed_path):
        print(f"Seed file not found: {seed_path}")
        return

    commands = load_seed(seed_path).get("commands", [])

    if not args.apply:
        for command in commands:
            print(f"Preparing: {command.get('op')} {command.get('spot_id')} by {command.get('actor')}")
        print("Dry run complete. Re-run with --apply to write to the store.")
        return

    backend = args.backend or settings.STORAGE_BACKEND
    service = HazardService(create_store(backend))

    for command in commands:
        result = apply_command(service, command)
        outcome = "ok" if result.success else f"failed ({result.error.value})"
        print(f"{command.get('op')} {command.get('spot_id')} by {command.get('actor')}: {outcome}")

    for summary in service.get_dangerous_spots():
        level = service.get_spot_danger_level(summary.spot_id).level.value
        print(f"Spot {summary.spot_id}: {level} ({summary.report_count} active alerts)")

    print(f"Seeding completed on '{backend}' backend.")


if __name__ == "__main__":
    main()
