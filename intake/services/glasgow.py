"""Glasgow coma scale: sub-score bounds, labels and the derived total."""

GLASGOW_EYE_RANGE = (1, 4)
GLASGOW_VERBAL_RANGE = (1, 5)
GLASGOW_MOTOR_RANGE = (1, 6)

GLASGOW_MIN_TOTAL = 3
GLASGOW_MAX_TOTAL = 15

EYE_RESPONSES = {
    1: "No eye opening",
    2: "Eye opening to pain",
    3: "Eye opening to voice",
    4: "Eyes open spontaneously",
}

VERBAL_RESPONSES = {
    1: "No verbal response",
    2: "Incomprehensible sounds",
    3: "Inappropriate words",
    4: "Confused",
    5: "Oriented",
}

MOTOR_RESPONSES = {
    1: "No motor response",
    2: "Extension to pain",
    3: "Flexion to pain",
    4: "Withdrawal from pain",
    5: "Localizes pain",
    6: "Obeys commands",
}


def glasgow_total(eye: int, verbal: int, motor: int) -> int:
    """Sum the three sub-scores. Inputs are already range-checked."""
    return eye + verbal + motor


def classify_glasgow(total: int) -> str:
    """Return the conventional severity band for a Glasgow total."""
    if total <= 8:
        return "severe"
    if total <= 12:
        return "moderate"
    return "mild"
