from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import ValidationError

from quizhub.client.api_client import QuizApiClient
from quizhub.client.schemas import CurrentUser, QuizSummary
from quizhub.client.store import CURRENT_USER, LocalStore
from quizhub.core.config import Settings, settings as default_settings


@dataclass
class AppState:
    """Everything the client components share: the local store, the API client,
    who is logged in, and the quiz list last shown in the library."""
    store: LocalStore
    api: QuizApiClient
    current_user: Optional[CurrentUser] = None
    quizzes: List[QuizSummary] = field(default_factory=list)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "AppState":
        settings = settings or default_settings
        state = cls(store=LocalStore(settings.STORE_PATH),
                    api=QuizApiClient(settings.API_BASE_URL, timeout=settings.API_TIMEOUT))
        state.load_current_user()
        return state

    def load_current_user(self) -> Optional[CurrentUser]:
        raw = self.store.get(CURRENT_USER)
        try:
            self.current_user = CurrentUser.model_validate(raw) if raw else None
        except ValidationError:
            self.current_user = None
        return self.current_user

    @property
    def username(self) -> Optional[str]:
        return self.current_user.username if self.current_user else None
