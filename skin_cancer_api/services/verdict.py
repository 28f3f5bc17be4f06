from typing import Literal, NamedTuple

CANCER = "Cancer"
NON_CANCER = "Non-cancer"

SUGGESTIONS = {
    CANCER: "Segera periksa ke dokter!",
    NON_CANCER: "Penyakit kanker tidak terdeteksi.",
}

DEFAULT_THRESHOLD = 0.5


class Verdict(NamedTuple):
    result: Literal["Cancer", "Non-cancer"]
    suggestion: str


def map_verdict(score: float, threshold: float = DEFAULT_THRESHOLD) -> Verdict:
    # строго больше порога -> Cancer
    result = CANCER if score > threshold else NON_CANCER
    return Verdict(result=result, suggestion=SUGGESTIONS[result])
