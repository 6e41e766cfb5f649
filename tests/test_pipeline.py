"""Tests for the offline replay pipeline."""

import json
import math

import numpy as np

from audiodrivers.params import AudioProcessorParams, SETTINGS_VERSION
from audiodrivers.pipeline import AudioPipeline


class TestAudioPipeline:
    """Tests for AudioPipeline."""

    def test_fps(self):
        assert AudioPipeline(sample_rate=44100, frame_size=512).fps == 44100 / 512

    def test_trace_frame_count(self, mixed_signal):
        y, sr = mixed_signal
        trace = AudioPipeline(sample_rate=sr, buckets=24).trace(y)

        assert trace.n_frames == math.ceil(len(y) / 512)
        assert trace.buckets == 24
        assert np.all(np.isfinite(trace.amp))

    def test_runs_are_independent(self, white_noise):
        y, sr = white_noise
        pipeline = AudioPipeline(sample_rate=sr)

        first = pipeline.trace(y[:8192])
        second = pipeline.trace(y[:8192])

        np.testing.assert_array_equal(first.amp, second.amp)
        np.testing.assert_array_equal(first.energy, second.energy)

    def test_params_reach_processor(self):
        params = AudioProcessorParams(decimation=0.5)
        processor = AudioPipeline(length=60, params=params).make_processor()

        assert processor.length == 30
        assert processor.params is params

    def test_process_signal(self, pure_sine):
        y, sr = pure_sine
        result = AudioPipeline(sample_rate=sr).process_signal(y)

        assert result["n_frames"] == math.ceil(len(y) / 512)
        assert result["duration"] == len(y) / sr
        assert result["manifest"]["metadata"]["settings"][0] == SETTINGS_VERSION
        assert "output_path" not in result

    def test_process_file_json(self, temp_audio_file, tmp_path, sample_rate):
        output = tmp_path / "out.json"
        result = AudioPipeline(sample_rate=sample_rate).process(temp_audio_file, output)

        assert output.exists()
        assert result["output_path"] == str(output)
        with open(output, encoding="utf-8") as f:
            manifest = json.load(f)
        assert manifest["metadata"]["n_frames"] == result["n_frames"]

    def test_process_file_numpy(self, temp_audio_file, tmp_path, sample_rate):
        output = tmp_path / "out.npz"
        result = AudioPipeline(sample_rate=sample_rate).process(
            temp_audio_file, output, format="numpy"
        )

        data = np.load(output)
        assert data["amp"].shape == (result["n_frames"], 36)
