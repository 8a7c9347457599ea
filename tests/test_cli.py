import yaml
import zarr

from mpeak.cli import main, summarize
from mpeak.config import Config
from mpeak.frame_index import load_frame_index
from mpeak.packagetypes import StreamSummary, WalkPolicy

from conftest import make_frame, make_header_word, make_id3


def _write(tmp_path, name, data):
    path = tmp_path / name
    path.write_bytes(data)
    return path


class TestSummarize:

    def test_summary(self, mp3_buffer):
        summary = summarize(mp3_buffer, with_frames=True)
        assert isinstance(summary, StreamSummary)
        assert summary["is_mp3"] is True
        assert summary["has_metadata"] is True
        assert summary["metadata_offset"] == 30
        assert summary["frame_count"] == 3
        assert summary["frame_lengths"] == [417, 417, 417]
        assert summary["first_header"]["bitrate_kbps"] == 128
        assert summary["truncated_last_frame"] is False

    def test_metadata_only(self):
        summary = summarize(make_id3(3))
        assert summary["first_header"] is None
        assert summary["frame_count"] == 0
        assert summary["frame_lengths"] is None


class TestMain:

    def test_info(self, tmp_path, capsys, mp3_buffer):
        path = _write(tmp_path, "song.mp3", mp3_buffer)
        assert main(["info", str(path), "--frames"]) == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["frame_count"] == 3
        assert data["frame_lengths"] == [417, 417, 417]

    def test_missing_file(self, tmp_path, capsys):
        assert main(["info", str(tmp_path / "missing.mp3")]) == 1
        assert "Can not open" in capsys.readouterr().err

    def test_invalid_header_strict_and_lenient(self, tmp_path, capsys):
        data = make_frame() + make_header_word(sample_rate_index=3).to_bytes(4, 'big') + bytes(20)
        path = _write(tmp_path, "damaged.mp3", data)
        assert main(["info", str(path)]) == 1
        assert main(["--lenient", "info", str(path)]) == 0
        assert Config.frame_walk_policy == WalkPolicy.STRICT
        out = capsys.readouterr().out
        assert "salvaged_last_frame: true" in out

    def test_mix(self, tmp_path):
        path_a = _write(tmp_path, "a.mp3", make_frame() * 3)
        path_b = _write(tmp_path, "b.mp3", make_id3(8) + make_frame() * 2)
        out = tmp_path / "mixed.mp3"
        assert main(["mix", str(path_a), str(path_b), "-o", str(out), "--seed", "2"]) == 0
        assert out.read_bytes() == make_frame() * 2

    def test_index(self, tmp_path, mp3_buffer):
        path = _write(tmp_path, "song.mp3", mp3_buffer)
        store = tmp_path / "song.zarr"
        assert main(["index", str(path), "--store", str(store), "--name", "frames"]) == 0
        group = zarr.open_group(str(store), mode="r")
        assert load_frame_index(group, "frames").shape == (3, 3)
        assert len(group["frames"].attrs["source_sha256"]) == 64

    def test_config_file(self, tmp_path, mp3_buffer):
        config_path = _write(tmp_path, "mpeak.yaml", b"frame_walk_policy: lenient\nmax_workers: 2\n")
        path = _write(tmp_path, "song.mp3", mp3_buffer)
        assert main(["--config", str(config_path), "--log-level", "error", "info", str(path)]) == 0
        assert Config.max_workers == 2
        assert Config.frame_walk_policy == WalkPolicy.LENIENT

    def test_index_exists_and_overwrite(self, tmp_path, capsys, mp3_buffer):
        path = _write(tmp_path, "song.mp3", mp3_buffer)
        store = str(tmp_path / "song.zarr")
        assert main(["index", str(path), "--store", store]) == 0
        assert main(["index", str(path), "--store", store]) == 1
        assert "already exists" in capsys.readouterr().err
        assert main(["index", str(path), "--store", store, "--overwrite"]) == 0
        assert load_frame_index(zarr.open_group(store, mode="r")).shape == (3, 3)

    def test_index_without_frames(self, tmp_path, capsys):
        path = _write(tmp_path, "tag_only.mp3", make_id3(3))
        assert main(["index", str(path), "--store", str(tmp_path / "tag.zarr")]) == 1
        assert "No MP3 frames" in capsys.readouterr().err

    def test_missing_config_file(self, tmp_path, capsys, mp3_buffer):
        path = _write(tmp_path, "song.mp3", mp3_buffer)
        assert main(["--config", str(tmp_path / "nope.yaml"), "info", str(path)]) == 1
        assert "invalid configuration" in capsys.readouterr().err

    def test_unknown_config_key(self, tmp_path, capsys, mp3_buffer):
        config_path = _write(tmp_path, "mpeak.yaml", b"no_such_key: 1\n")
        path = _write(tmp_path, "song.mp3", mp3_buffer)
        assert main(["--config", str(config_path), "info", str(path)]) == 1
        assert "no_such_key" in capsys.readouterr().err

    def test_broken_yaml(self, tmp_path, mp3_buffer):
        config_path = _write(tmp_path, "mpeak.yaml", b"log_level: [unclosed\n")
        path = _write(tmp_path, "song.mp3", mp3_buffer)
        assert main(["--config", str(config_path), "info", str(path)]) == 1
