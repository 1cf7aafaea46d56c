from typing import Iterable, List

SYMPTOM_LIST = [
    "Fever",
    "Cough",
    "Headache",
    "Sore Throat",
    "Fatigue",
    "Runny Nose",
    "Shortness of Breath",
    "Chest Pain",
    "Nausea",
    "Vomiting",
    "Diarrhea",
    "Abdominal Pain",
    "Muscle Aches",
    "Joint Pain",
    "Dizziness",
    "Rash",
    "Chills",
    "Loss of Appetite",
    "Loss of Taste or Smell",
    "Sneezing",
]

# lower-case phrase -> catalogue label
SYNONYMS = {
    "throwing up": "Vomiting",
    "throw up": "Vomiting",
    "belly ache": "Abdominal Pain",
    "stomach ache": "Abdominal Pain",
    "feverish": "Fever",
    "feaver": "Fever",
    "high temperature": "Fever",
    "breathless": "Shortness of Breath",
    "light headed": "Dizziness",
    "lightheaded": "Dizziness",
    "soar throat": "Sore Throat",
    "tired": "Fatigue",
    "body aches": "Muscle Aches",
}

_CANONICAL = {s.lower(): s for s in SYMPTOM_LIST}


def canonical_label(label: str) -> str:
    text = " ".join(label.split())
    key = text.lower()
    if key in SYNONYMS:
        return SYNONYMS[key]
    return _CANONICAL.get(key, text)


def normalize_selection(labels: Iterable[str]) -> List[str]:
    """Canonicalise selected labels, dropping blanks and duplicates (first seen wins)."""
    out = []
    seen = set()
    for label in labels or []:
        if not isinstance(label, str):
            continue
        norm = canonical_label(label)
        if not norm or norm.lower() in seen:
            continue
        seen.add(norm.lower())
        out.append(norm)
    return out


def toggle_symptom(selected: List[str], symptom: str) -> List[str]:
    if symptom in selected:
        return [s for s in selected if s != symptom]
    return [*selected, symptom]
