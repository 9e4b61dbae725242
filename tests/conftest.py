from __future__ import annotations

import copy
import json
import time
from typing import Optional

import jwt
import pytest

from app.core.config import AppSettings, CompletionSettings, JWTSettings, Settings
from app.core.jwt_utils import JWTVerifier
from app.modules.study_buddy.handler import GenerationHandler

JWT_SECRET = "test-secret-with-enough-bytes-for-hs256"


PACKAGE = {
    "explanation": {
        "english": "Photosynthesis is how green plants make food from light.",
        "tamil": "ஒளிச்சேர்க்கை என்பது பச்சை தாவரங்கள் ஒளியிலிருந்து உணவு தயாரிக்கும் முறை.",
    },
    "flashcards": [
        {
            "question": "What pigment absorbs light?",
            "answer": "Chlorophyll",
            "questionTamil": "எந்த நிறமி ஒளியை உறிஞ்சுகிறது?",
            "answerTamil": "பச்சையம்",
        },
        {
            "question": "Which gas is released?",
            "answer": "Oxygen",
            "questionTamil": "எந்த வாயு வெளியிடப்படுகிறது?",
            "answerTamil": "ஆக்சிஜன்",
        },
        {
            "question": "Where does it happen?",
            "answer": "In the chloroplast",
            "questionTamil": "இது எங்கு நடக்கிறது?",
            "answerTamil": "பசுங்கணிகத்தில்",
        },
    ],
    "practiceQuestions": {
        "mcq": [
            {
                "question": f"Question {n}?",
                "questionTamil": f"கேள்வி {n}?",
                "options": ["A", "B", "C", "D"],
                "optionsTamil": ["அ", "ஆ", "இ", "ஈ"],
                "correct": n % 4,
            }
            for n in range(3)
        ],
        "short": [
            {"question": "Define stomata.", "questionTamil": "இலைத்துளை வரையறு.", "marks": 2},
            {"question": "Name the products.", "questionTamil": "விளைபொருட்களை குறிப்பிடு.", "marks": 2},
        ],
        "long": {
            "question": "Explain the light reactions {step by step.",
            "questionTamil": "ஒளி வினைகளை விளக்குக.",
            "marks": 5,
        },
    },
    "quickRevision": {
        "english": "Light + CO2 + water -> glucose + oxygen.",
        "tamil": "ஒளி + கார்பன் டை ஆக்சைடு + நீர் -> குளுக்கோஸ் + ஆக்சிஜன்.",
    },
}


@pytest.fixture
def package() -> dict:
    return copy.deepcopy(PACKAGE)


@pytest.fixture
def package_json(package) -> str:
    return json.dumps(package, ensure_ascii=False)


class FakeCompleter:
    """Records prompts and replies with canned text (or raises)."""

    def __init__(self, reply: str = "", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def completer(package_json) -> FakeCompleter:
    return FakeCompleter(reply=package_json)


def make_token(
    secret: str = JWT_SECRET,
    *,
    sub: str = "user-1",
    aud: str = "authenticated",
    expires_in: int = 3600,
) -> str:
    now = int(time.time())
    return jwt.encode(
        {"sub": sub, "aud": aud, "iat": now, "exp": now + expires_in},
        secret,
        algorithm="HS256",
    )


@pytest.fixture
def jwt_settings() -> JWTSettings:
    return JWTSettings(JWT_SECRET=JWT_SECRET, JWT_AUDIENCE="authenticated")


@pytest.fixture
def verifier(jwt_settings) -> JWTVerifier:
    return JWTVerifier(jwt_settings)


@pytest.fixture
def settings(jwt_settings) -> Settings:
    return Settings(
        app=AppSettings(STATIC_DIR=None, AUTH_REQUIRED=True),
        completion=CompletionSettings(GEMINI_API_KEY="test-key"),
        jwt=jwt_settings,
    )


@pytest.fixture
def handler(completer, verifier) -> GenerationHandler:
    return GenerationHandler(completer, verifier, auth_required=True)
