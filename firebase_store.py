"""
firebase_store.py
Score and progress persistence in Cloud Firestore, plus the background
reporter the games hand their final results to.
"""

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore

log = logging.getLogger(__name__)

GAME_NAME = "Word Obstacle Game"
SCORES_COLLECTION = "obstacle_game"
GAME_SCORES_COLLECTION = "scores"
PROGRESS_COLLECTION = "userProgress"


@dataclass
class PlayerProfile:
    user_id: str = ""
    email: str = ""
    display_name: str = ""

    @classmethod
    def from_settings(cls, settings):
        if settings is None:
            return None
        uid = getattr(settings, "user_id", "") or ""
        if not uid:
            return None
        return cls(
            user_id=uid,
            email=getattr(settings, "email", "") or "",
            display_name=getattr(settings, "player_name", "") or "",
        )

    def fields(self):
        return {
            "userId": self.user_id,
            "email": self.email,
            "displayName": self.display_name,
        }


def merge_progress(existing, update):
    """Merge nested mappings; keys missing from `update` are kept from `existing`."""
    merged = dict(existing or {})
    for key, value in update.items():
        old = merged.get(key)
        if isinstance(value, Mapping) and isinstance(old, Mapping):
            merged[key] = merge_progress(old, value)
        else:
            merged[key] = value
    return merged


class ScoreStore:
    """Thin wrapper over a Firestore client."""

    def __init__(self, db):
        self.db = db

    @classmethod
    def from_credentials(cls, path):
        """Initialize the Firebase app once and return a store on its client."""
        if not firebase_admin._apps:
            cred = credentials.Certificate(str(path))
            firebase_admin.initialize_app(cred)
        return cls(firestore.client())

    def save_score(self, score, level="beginner", user: Optional[PlayerProfile] = None):
        payload = {}
        if user is not None:
            payload.update(user.fields())
        payload.update(
            {
                "gameName": GAME_NAME,
                "level": level,
                "score": int(score),
                "timestamp": firestore.SERVER_TIMESTAMP,
            }
        )
        log.info("Saving score %s (%s)", payload["score"], level)
        self.db.collection(SCORES_COLLECTION).add(payload)
        return True

    def log_user_progress(self, user, module, level, data):
        if user is None:
            log.warning("No player profile - progress not saved")
            return False
        try:
            ref = self.db.collection(PROGRESS_COLLECTION).document(user.user_id)
            snap = ref.get()
            existing = snap.to_dict() if snap.exists else {}
            entry = {"gameName": GAME_NAME, "level": level}
            entry.update(data)
            entry["timestamp"] = firestore.SERVER_TIMESTAMP
            update = {
                module: {level: entry},
                "userId": user.user_id,
                "lastUpdated": firestore.SERVER_TIMESTAMP,
            }
            ref.set(merge_progress(existing, update), merge=True)
            log.info("Progress logged for %s: %s/%s", user.user_id, module, level)
            return True
        except Exception as e:
            log.error("Error logging progress: %s", e)
            return False

    def store_game_score(self, user, module, level, score_data):
        if user is None:
            log.warning("No player profile - score not saved")
            return False
        try:
            payload = {
                "userId": user.user_id,
                "gameName": GAME_NAME,
                "module": module,
                "level": level,
            }
            payload.update(score_data)
            payload["timestamp"] = firestore.SERVER_TIMESTAMP
            self.db.collection(GAME_SCORES_COLLECTION).add(payload)

            score = score_data.get("score", 0)
            total = score_data.get("totalQuestions", 0)
            percentage = round(score / total * 100) if total else 0
            self.log_user_progress(
                user,
                module,
                level,
                {
                    "lastScore": score,
                    "totalQuestions": total,
                    "percentage": percentage,
                    "completed": bool(total) and score == total,
                    "lastPlayed": firestore.SERVER_TIMESTAMP,
                },
            )
            return True
        except Exception as e:
            log.error("Error storing score: %s", e)
            return False

    def get_user_progress(self, user, module=None, level=None):
        if user is None:
            return None
        try:
            snap = self.db.collection(PROGRESS_COLLECTION).document(user.user_id).get()
            if not snap.exists:
                log.info("No progress data for %s", user.user_id)
                return None
            data = snap.to_dict() or {}
            if module and level:
                return (data.get(module) or {}).get(level)
            if module:
                return data.get(module)
            return data
        except Exception as e:
            log.error("Error getting progress: %s", e)
            return None

    def _scores_query(self, user, module=None, level=None):
        q = self.db.collection(GAME_SCORES_COLLECTION).where("userId", "==", user.user_id)
        if module:
            q = q.where("module", "==", module)
            if level:
                q = q.where("level", "==", level)
        return q.order_by("timestamp", direction=firestore.Query.DESCENDING)

    def get_user_scores(self, user, module=None, level=None, limit=10):
        if user is None:
            return []
        try:
            q = self._scores_query(user, module, level).limit(limit)
            return [dict(doc.to_dict(), id=doc.id) for doc in q.stream()]
        except Exception as e:
            log.error("Error getting scores: %s", e)
            return []

    def get_user_stats(self, user):
        if user is None:
            return None
        try:
            scores = [doc.to_dict() for doc in self._scores_query(user).stream()]
        except Exception as e:
            log.error("Error getting stats: %s", e)
            return None
        total_correct = sum(s.get("score", 0) for s in scores)
        total_questions = sum(s.get("totalQuestions", 0) for s in scores)
        modules = []
        for s in scores:
            if s.get("module") not in modules:
                modules.append(s.get("module"))
        return {
            "totalGames": len(scores),
            "totalCorrect": total_correct,
            "totalQuestions": total_questions,
            "overallPercentage": (
                round(total_correct / total_questions * 100) if total_questions else 0
            ),
            "modulesPlayed": modules,
            "lastPlayed": scores[0].get("timestamp") if scores else None,
        }


class ResultReporter:
    """Fire-and-forget score submission. Failures are logged, never raised."""

    def __init__(self, store: Optional[ScoreStore] = None, user=None):
        self.store = store
        self.user = user

    @classmethod
    def from_settings(cls, settings):
        path = getattr(settings, "firebase_credentials", "") if settings else ""
        store = None
        if path:
            try:
                store = ScoreStore.from_credentials(path)
            except Exception as e:
                log.error("Could not initialize Firebase from %s: %s", path, e)
        return cls(store, PlayerProfile.from_settings(settings))

    def _send(self, result):
        try:
            self.store.save_score(result.score, result.level, self.user)
            log.info("Score %s submitted", result.score)
        except Exception as e:
            log.error("Error submitting score to Firebase: %s", e)

    def submit(self, result):
        if self.store is None:
            log.info("Score %s not saved: Firebase not configured", result.score)
            return None
        t = threading.Thread(target=self._send, args=(result,), daemon=True)
        t.start()
        return t
