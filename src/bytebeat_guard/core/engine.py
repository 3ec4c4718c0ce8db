"""Numeric mode and sample rate settings handed to the audio engine.

A validated expression is evaluated by the engine together with one of these
settings. Stored rows use the short encoded forms; unknown or missing encoded
values decode to the engine defaults (float mode, 44.1kHz).
"""

from enum import Enum
from typing import Literal


class ModeOption(str, Enum):
    INT = "int"
    FLOAT = "float"


class SampleRateOption(str, Enum):
    RATE_8K = "8kHz"
    RATE_16K = "16kHz"
    RATE_44_1K = "44.1kHz"


EncodedMode = Literal["int", "float"]
EncodedSampleRate = Literal["8k", "16k", "44.1k"]

_SAMPLE_RATE_HZ: dict[SampleRateOption, int] = {
    SampleRateOption.RATE_8K: 8000,
    SampleRateOption.RATE_16K: 16000,
    SampleRateOption.RATE_44_1K: 44100,
}

_SAMPLE_RATE_ENCODING: dict[SampleRateOption, str] = {
    SampleRateOption.RATE_8K: "8k",
    SampleRateOption.RATE_16K: "16k",
    SampleRateOption.RATE_44_1K: "44.1k",
}


def get_sample_rate_value(sample_rate: SampleRateOption) -> int:
    return _SAMPLE_RATE_HZ[sample_rate]


def encode_mode(mode: ModeOption) -> str:
    return mode.value


def decode_mode(value: str | None) -> ModeOption:
    if value == ModeOption.INT.value:
        return ModeOption.INT
    return ModeOption.FLOAT


def encode_sample_rate(sample_rate: SampleRateOption) -> str:
    return _SAMPLE_RATE_ENCODING[sample_rate]


def decode_sample_rate(value: str | None) -> SampleRateOption:
    for option, encoded in _SAMPLE_RATE_ENCODING.items():
        if value == encoded:
            return option
    return SampleRateOption.RATE_44_1K
