"""Saving finished games to the local and remote stores and keeping them in step.

The remote store is the system of record; the local store is a cache that
also catches plays the remote never received. Strategies:
- save: remote first; the local copy is written whatever the remote says
- pull: insert-if-absent by (user_id, remote_id); remote games are immutable
- daily gate: local check OR remote check, remote failure counts as "no"
"""

import logging
import threading
from collections import defaultdict
from datetime import datetime
from typing import Callable

from core.database_adapter import DatabaseAdapter
from core.models import GameMode, GameRecord, UserProfile, UserStats
from core.remote_store import RemoteStore
from core.result import Result
from utils.dates import day_bounds_ms, now_ms

log = logging.getLogger("wordlesync.sync_coordinator")

StatsListener = Callable[[UserStats], None]


class SyncCoordinator:
    """Coordinates the local cache with the remote store.

    One instance is shared by everything that reads or writes games, so
    the per-user pull locks and the stats listeners are process-wide.
    """

    def __init__(self, local_adapter: DatabaseAdapter, remote_store: RemoteStore):
        """Initialize sync coordinator.

        Args:
            local_adapter: Local game store (initialized)
            remote_store: Remote system of record
        """
        self.local = local_adapter
        self.remote = remote_store

        self._locks_guard = threading.Lock()
        self._pull_locks: dict[str, threading.Lock] = {}
        self._listeners: dict[str, list[StatsListener]] = defaultdict(list)

    # ========== Save ==========

    def save_game(self, record: GameRecord) -> Result[str]:
        """Save a finished game to both stores.

        The record is stored locally even when the remote create fails, so
        no play is lost; that copy stays LOCAL_ONLY.

        Args:
            record: Finished game without a remote id

        Returns:
            Result carrying the remote id, or the remote failure
        """
        log.debug(f"Saving game {record.word} for user {record.user_id}")
        result = self.remote.create_game(record)

        if not result.success:
            log.error(f"Remote save failed, keeping game locally only: {result.error}")
            self.insert_game_locally(record.with_remote_id(""))
            return result

        remote_id = result.value
        log.info(f"Saved game for user {record.user_id} remotely as {remote_id}")
        self.insert_game_locally(record.with_remote_id(remote_id))
        self._update_remote_stats(record.user_id, record.won)
        return Result.ok(remote_id)

    def insert_game_locally(self, record: GameRecord) -> int | None:
        """Insert a record into the local store and notify stats listeners.

        Returns:
            Assigned local id, or None if the store ignored the insert
        """
        local_id = self.local.insert_game(record.with_local_id(None))
        if local_id is not None:
            log.debug(f"Stored game {record.word} locally as {local_id}")
            self._notify_stats(record.user_id)
        return local_id

    def _update_remote_stats(self, user_id: str, won: bool) -> None:
        """Read-increment-write the remote aggregate stats.

        Failures are logged only; the game itself is already saved.
        """
        user_result = self.remote.get_user(user_id)
        if not user_result.success:
            log.warning(f"Could not read remote stats for {user_id}: {user_result.error}")
            return

        profile = user_result.value
        if profile is None:
            log.info(f"No remote profile for {user_id}, creating one")
            create_result = self.remote.create_user(
                UserProfile(
                    user_id=user_id,
                    created_at=now_ms(),
                    total_games=1,
                    total_wins=1 if won else 0,
                )
            )
            if not create_result.success:
                log.warning(f"Could not create remote profile for {user_id}: {create_result.error}")
            return

        total_games = profile.total_games + 1
        total_wins = profile.total_wins + 1 if won else profile.total_wins
        log.debug(f"Updating remote stats for {user_id}: games={total_games}, wins={total_wins}")
        update_result = self.remote.update_user_stats(user_id, total_games, total_wins)
        if not update_result.success:
            log.warning(f"Could not update remote stats for {user_id}: {update_result.error}")

    # ========== Pull ==========

    def _pull_lock(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._pull_locks.get(user_id)
            if lock is None:
                lock = self._pull_locks[user_id] = threading.Lock()
            return lock

    def sync_from_remote(self, user_id: str) -> Result[list[GameRecord]]:
        """Pull a user's remote games into the local cache.

        Games already cached (same user and remote id) are left alone.
        Concurrent pulls for one user run one after the other.

        Args:
            user_id: User to sync

        Returns:
            Result carrying the remote game list, or the remote failure
        """
        with self._pull_lock(user_id):
            log.info(f"Syncing games from remote for user {user_id}")
            result = self.remote.list_user_games(user_id)

            if not result.success:
                log.error(f"Failed to sync from remote: {result.error}")
                return result

            remote_games = result.value or []
            pulled = 0
            for game in remote_games:
                if not game.remote_id:
                    log.warning(f"Skipping remote game without id: {game.word}")
                    continue
                if game.user_id != user_id:
                    log.warning(f"Skipping remote game {game.remote_id} of another user")
                    continue

                if self.local.get_game_by_remote_id(user_id, game.remote_id) is not None:
                    log.debug(f"Game {game.remote_id} already exists locally")
                    continue

                if self.local.insert_game(game.with_local_id(None)) is not None:
                    pulled += 1

            log.info(f"Sync from remote complete: remote={len(remote_games)}, pulled={pulled}")
            if pulled:
                self._notify_stats(user_id)
            return result

    def load_history(self, user_id: str, mode: GameMode | None = None) -> list[GameRecord]:
        """Refresh from the remote store, then read the local cache.

        A failed pull leaves the cached view as it was.
        """
        self.sync_from_remote(user_id)
        if mode is None:
            return self.local.get_all_games(user_id)
        return self.local.get_games_by_mode(user_id, mode)

    # ========== Daily gate ==========

    def has_played_daily_today(self, user_id: str, now: datetime | None = None) -> bool:
        """Whether the user already played today's DAILY game.

        The local cache is checked first; the remote store is asked only to
        catch a game played on another device. A remote failure counts as
        "not played" and never overrides a local hit.

        Args:
            user_id: User to check
            now: Moment defining "today" (defaults to now, local time)
        """
        start_ms, end_ms = day_bounds_ms(now)

        if self.local.get_daily_game_in_range(user_id, start_ms, end_ms) is not None:
            return True

        result = self.remote.has_daily_game(user_id, start_ms, end_ms)
        if not result.success:
            log.warning(f"Remote daily check failed, relying on local data: {result.error}")
        return result.get_or_default(False)

    # ========== Local reads ==========

    def get_all_games(self, user_id: str) -> list[GameRecord]:
        return self.local.get_all_games(user_id)

    def get_games_by_mode(self, user_id: str, mode: GameMode) -> list[GameRecord]:
        return self.local.get_games_by_mode(user_id, mode)

    def get_total_games(self, user_id: str) -> int:
        return self.local.count_games(user_id)

    def get_total_wins(self, user_id: str) -> int:
        return self.local.count_wins(user_id)

    def get_stats(self, user_id: str) -> UserStats:
        return UserStats(
            total_games=self.local.count_games(user_id),
            total_wins=self.local.count_wins(user_id),
        )

    def reset_user_games(self, user_id: str) -> int:
        """Delete a user's cached games (account reset)."""
        deleted = self.local.delete_user_games(user_id)
        self._notify_stats(user_id)
        return deleted

    # ========== Live stats ==========

    def add_stats_listener(self, user_id: str, listener: StatsListener) -> None:
        """Call listener with fresh stats whenever the user's games change.

        The listener is called once right away with the current stats.
        """
        with self._locks_guard:
            self._listeners[user_id].append(listener)
        listener(self.get_stats(user_id))

    def remove_stats_listener(self, user_id: str, listener: StatsListener) -> None:
        with self._locks_guard:
            listeners = self._listeners.get(user_id, [])
            if listener in listeners:
                listeners.remove(listener)

    def _notify_stats(self, user_id: str) -> None:
        with self._locks_guard:
            listeners = list(self._listeners.get(user_id, []))
        if not listeners:
            return

        stats = self.get_stats(user_id)
        for listener in listeners:
            try:
                listener(stats)
            except Exception as e:
                log.error(f"Stats listener failed: {e}")
