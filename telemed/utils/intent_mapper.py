from typing import List, Optional
import re
import enum
import logging

logger = logging.getLogger("chatbot")


class Intent(enum.Enum):
    CHAT_DOCTOR = "chat_doctor"
    FIND_DOCTOR = "find_doctor"
    HOSPITALS = "hospitals"
    PHARMACIES = "pharmacies"
    LABS = "labs"
    MY_APPOINTMENTS = "my_appointments"
    UNKNOWN = "unknown"


# Checked in insertion order, first match wins. Keywords match at a word start
INTENT_KEYWORD_MAP = {
    Intent.CHAT_DOCTOR: ["wasiliana", "ongea", "chat"],
    Intent.FIND_DOCTOR: ["daktari", "doctor", "tafuta"],
    Intent.HOSPITALS: ["hospitali", "hospital"],
    Intent.PHARMACIES: ["dawa", "famasi", "pharmacy"],
    Intent.LABS: ["maabara", "lab", "test"],
    Intent.MY_APPOINTMENTS: ["miadi", "appointment"],
}

# Words that carry the intent and never part of a doctor's name
SEARCH_STOP_WORDS = {"daktari", "doctor", "tafuta", "nataka", "nipatie", "find", "the", "for", "with"}

SYMPTOM_SPECIALIZATION_MAP = {
    "Cardiology": [
        "cardio", "heart", "moyo", "chest pain", "blood pressure", "shinikizo", "palpitations"
    ],
    "Orthopedics": [
        "ortho", "bone", "joint", "fracture", "back pain", "knee pain", "arthritis"
    ],
    "Pediatrics": [
        "pediatric", "child", "baby", "infant", "watoto", "mtoto"
    ],
    "Dermatology": [
        "derma", "skin", "ngozi", "rash", "acne", "eczema"
    ],
    "Neurology": [
        "neuro", "headache", "kichwa", "migraine", "seizure", "dizziness"
    ],
    "Gynecology": [
        "gynec", "pregnancy", "pregnant", "mimba", "menstruation"
    ],
    "Dentistry": [
        "dentist", "tooth", "teeth", "meno"
    ],
    "General Medicine": [
        "general", "physician", "fever", "homa", "malaria", "cough", "kikohozi", "diabetes", "kisukari"
    ],
}


def extract_intent_from_text(text: str) -> Intent:
    if not text:
        return Intent.UNKNOWN

    text_lower = text.lower()
    for intent, keywords in INTENT_KEYWORD_MAP.items():
        for keyword in keywords:
            if re.search(r"\b" + re.escape(keyword), text_lower):
                logger.debug(f"Matched intent {intent.value} on '{keyword}'")
                return intent

    logger.debug(f"No intent detected in: '{text_lower}'")
    return Intent.UNKNOWN


def extract_name_words(text: str) -> List[str]:
    """Candidate name fragments from a doctor search query"""
    return [
        word for word in text.lower().split()
        if len(word) > 2 and word not in SEARCH_STOP_WORDS
    ]


def extract_specialization_from_text(text: str) -> Optional[str]:
    if not text:
        return None

    text_lower = text.lower()
    specialization_scores = {}

    for specialization, keywords in SYMPTOM_SPECIALIZATION_MAP.items():
        score = 0
        for keyword in keywords:
            if keyword in text_lower:
                score += len(keyword.split())

        if score > 0:
            specialization_scores[specialization] = score

    if specialization_scores:
        best_match = max(specialization_scores, key=specialization_scores.get)
        logger.debug(f"Detected specialization: {best_match} (from '{text}')")
        return best_match

    return None
