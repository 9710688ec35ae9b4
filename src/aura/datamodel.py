from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
from datetime import datetime

__all__ = [
    "ReminderRecord", "ReminderIntent",
    "Sender", "ChatMessage",
    "SuggestionCategory", "SuggestionPriority", "SuggestionCandidate", "SuggestionState",
    "TimeOfDay", "EnvironmentalContext",
]

# ----------------- Reminder data model ----------------
@dataclass
class ReminderRecord:
    reminder_id: str
    owner_id: str
    text: str
    due_at: datetime  # aware, UTC
    active: bool = True  # only ever flipped to False by the core
    created_at: Optional[datetime] = None


@dataclass
class ReminderIntent:
    is_reminder: bool
    title: str
    time_text: str
    confidence: int


# ----------------- Chat data model ----------------
class Sender(str, Enum):
    USER = "user"
    AURA = "aura"

@dataclass
class ChatMessage:
    owner_id: Optional[str]
    content: str
    sender: Sender = Sender.AURA
    metadata: Optional[Dict[str, Any]] = None


# ----------------- Suggestion data model ----------------
class SuggestionCategory(str, Enum):
    HYDRATION = "hydration"
    INDOOR = "indoor"
    OUTDOOR = "outdoor"
    COMFORT = "comfort"

class SuggestionPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

@dataclass
class SuggestionCandidate:
    id: str  # one per rule, never per invocation
    category: SuggestionCategory
    priority: SuggestionPriority
    message: str
    icon: str = ""

@dataclass
class SuggestionState:
    """Session-scoped cooldown and repetition memory. Not persisted."""
    history: List[str] = field(default_factory=list)
    last_fired_at: Optional[datetime] = None  # None stands for "never fired"

    def record(self, candidate: SuggestionCandidate, now: datetime) -> None:
        self.history.append(candidate.id)
        self.last_fired_at = now

    def reset_history(self) -> None:
        self.history.clear()


# ----------------- Environment data model ----------------
class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"

@dataclass
class EnvironmentalContext:
    temperature: Optional[float] = None  # °C
    humidity: Optional[float] = None  # relative humidity, percent
    precipitation: bool = False
    is_hot: bool = False
    is_cold: bool = False
    time_of_day: Optional[TimeOfDay] = None
    available: bool = False
    description: Optional[str] = None
