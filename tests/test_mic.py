import pytest

from stackstt.mic import ListenEngine, Microphone, MicrophoneError


def test_read_frame_returns_samples_in_order():
    mic = Microphone(range(10))
    mic.begin(16000)
    assert mic.read_frame(4) == [0, 1, 2, 3]
    assert mic.read_frame(4) == [4, 5, 6, 7]


def test_short_final_frame_is_padded_with_silence():
    mic = Microphone([5, 6])
    mic.begin()
    assert mic.read_frame(4) == [5, 6, 0, 0]


def test_exhausted_microphone_raises():
    mic = Microphone([1])
    mic.begin()
    mic.read_frame(1)
    with pytest.raises(MicrophoneError):
        mic.read_frame(1)


def test_read_before_begin_raises():
    mic = Microphone([1, 2, 3])
    with pytest.raises(MicrophoneError):
        mic.read_frame(2)


def test_read_after_end_raises():
    mic = Microphone([1, 2, 3])
    mic.begin()
    mic.end()
    assert mic.active is False
    with pytest.raises(MicrophoneError):
        mic.read_frame(1)


def test_begin_sets_sample_rate():
    mic = Microphone()
    mic.begin(8000)
    assert mic.sample_rate == 8000
    assert mic.active is True


@pytest.mark.parametrize("rate", [0, -16000])
def test_begin_rejects_bad_sample_rate(rate):
    with pytest.raises(ValueError):
        Microphone().begin(rate)


def test_out_of_range_sample_raises():
    mic = Microphone([40000])
    mic.begin()
    with pytest.raises(ValueError):
        mic.read_frame(1)


def test_non_positive_frame_length_raises():
    mic = Microphone([1])
    mic.begin()
    with pytest.raises(ValueError):
        mic.read_frame(0)


def test_listen_keeps_latest_samples_in_ring_buffer():
    samples = list(range(25))
    engine = ListenEngine(Microphone(samples), frame_length=4, max_seconds=1)
    engine.begin(sample_rate=10)
    assert engine.listen() is False
    assert engine.buffered_samples() == (samples + [0, 0, 0])[-10:]


def test_listen_buffer_smaller_than_capacity_keeps_everything():
    samples = [3, -3, 7, -7]
    engine = ListenEngine(Microphone(samples), frame_length=2, max_seconds=1)
    engine.begin(sample_rate=100)
    engine.listen()
    assert engine.buffered_samples() == samples


def test_listen_before_begin_raises():
    engine = ListenEngine(Microphone([1, 2]))
    with pytest.raises(RuntimeError):
        engine.listen()


def test_end_stops_microphone_and_clears_buffer():
    mic = Microphone([1, 2, 3, 4])
    engine = ListenEngine(mic, frame_length=2, max_seconds=1)
    engine.begin(sample_rate=8)
    engine.listen()
    engine.end()
    assert mic.active is False
    assert engine.buffered_samples() == []


@pytest.mark.parametrize("kwargs", [{"frame_length": 0}, {"max_seconds": 0}])
def test_engine_rejects_bad_settings(kwargs):
    with pytest.raises(ValueError):
        ListenEngine(Microphone(), **kwargs)