import pytest
from toeic_splitter.features.silence_detection.data.ffmpeg_adapter import parse_silencedetect_output
from toeic_splitter.features.silence_detection.domain.models import SilenceEvent, SilenceEventKind
from toeic_splitter.features.silence_detection.service.api import pair_silence_periods, sorted_end_times

START = SilenceEventKind.START
END = SilenceEventKind.END

FFMPEG_STDERR = """\
Input #0, mp3, from 'part3.mp3':
  Duration: 00:01:40.00, start: 0.000000, bitrate: 128 kb/s
[silencedetect @ 0x55d] silence_start: -0.00204
[silencedetect @ 0x55d] silence_end: 1.5 | silence_duration: 1.50204
[silencedetect @ 0x55d] silence_start: 12.25
[silencedetect @ 0x55d] silence_end: 13.75 | silence_duration: 1.5
size=N/A time=00:01:40.00 bitrate=N/A speed= 512x
"""


def test_parse_silencedetect_output():
    events = parse_silencedetect_output(FFMPEG_STDERR)

    assert events == [
        SilenceEvent(START, 0.0),
        SilenceEvent(END, 1.5),
        SilenceEvent(START, 12.25),
        SilenceEvent(END, 13.75),
    ]


def test_parse_exponent_times():
    stderr = (
        "[silencedetect @ 0x55d] silence_start: 2.26757e-05\n"
        "[silencedetect @ 0x55d] silence_end: 1.25 | silence_duration: 1.24998\n"
        "[silencedetect @ 0x55d] silence_start: -4.5E-06\n"
        "[silencedetect @ 0x55d] silence_end: 1.5e+02 | silence_duration: 150\n"
    )

    events = parse_silencedetect_output(stderr)

    assert [e.kind for e in events] == [START, END, START, END]
    assert events[0].time == pytest.approx(2.26757e-05)
    assert events[1].time == 1.25
    assert events[2].time == 0.0
    assert events[3].time == 150.0


def test_parse_ignores_unrelated_lines():
    assert parse_silencedetect_output("frame=1 fps=0.0\nno silence here\n") == []


def test_event_time_must_be_non_negative():
    with pytest.raises(ValueError):
        SilenceEvent(START, -1.0)
    with pytest.raises(ValueError):
        SilenceEvent(END, float("nan"))


def test_pairing_uses_first_end_after_each_start():
    # Out-of-order input, and a trailing start with no end
    events = [
        SilenceEvent(END, 10.0),
        SilenceEvent(START, 8.5),
        SilenceEvent(START, 20.0),
        SilenceEvent(END, 21.0),
        SilenceEvent(START, 30.0),
    ]

    periods = pair_silence_periods(events)

    assert [(p.start, p.end) for p in periods] == [(8.5, 10.0), (20.0, 21.0)]
    assert periods[0].duration == pytest.approx(1.5)


def test_end_must_be_strictly_after_start():
    events = [SilenceEvent(START, 5.0), SilenceEvent(END, 5.0), SilenceEvent(END, 6.0)]

    periods = pair_silence_periods(events)

    assert [(p.start, p.end) for p in periods] == [(5.0, 6.0)]


def test_sorted_end_times():
    events = [SilenceEvent(END, 9.0), SilenceEvent(START, 1.0), SilenceEvent(END, 3.0)]

    assert sorted_end_times(events) == [3.0, 9.0]
