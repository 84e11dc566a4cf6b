import pandas as pd
import pytest

from facelandmarks import IOFailure
from facelandmarks.sequence.export import export_table, frames_to_dataframe, track_summary
from facelandmarks.types import Face, Frame


def _frames():
    return [
        Frame(
            id=0,
            width=100,
            height=80,
            faces=(
                Face(id=0, bbox=(10, 10, 20, 20), landmarks=((12, 14), (20, 14))),
                Face(id=1, bbox=(60, 10, 20, 20)),
            ),
        ),
        Frame(id=1, width=100, height=80),
        Frame(id=7, width=100, height=80, faces=(Face(id=0, bbox=(11, 10, 20, 20), landmarks=((13, 14), (21, 15))),)),
    ]


def test_frames_to_dataframe_has_one_row_per_face():
    df = frames_to_dataframe(_frames())

    assert len(df) == 3
    assert df["frame_index"].tolist() == [0, 0, 2]
    assert df["frame_id"].tolist() == [0, 0, 7]
    assert df.iloc[0]["landmarks"] == [12, 14, 20, 14]
    assert df.iloc[1]["num_landmarks"] == 0


def test_track_summary_reports_face_lifetimes():
    summary = track_summary(_frames()).set_index("face_id")

    assert summary.loc[0, "first_frame"] == 0
    assert summary.loc[0, "last_frame"] == 2
    assert summary.loc[0, "frames"] == 2
    assert summary.loc[1, "frames"] == 1


def test_track_summary_of_empty_sequence():
    assert track_summary([]).empty


def test_export_csv(tmp_path):
    path = export_table(tmp_path / "faces.csv", _frames())

    df = pd.read_csv(path)
    assert df["face_id"].tolist() == [0, 1, 0]
    assert df.iloc[0]["landmarks"] == "12 14 20 14"


def test_export_parquet(tmp_path):
    pytest.importorskip("pyarrow")
    path = export_table(tmp_path / "faces.parquet", _frames())

    df = pd.read_parquet(path)
    assert df["face_id"].tolist() == [0, 1, 0]
    assert list(df.iloc[2]["landmarks"]) == [13, 14, 21, 15]


def test_export_rejects_unknown_suffix(tmp_path):
    with pytest.raises(IOFailure):
        export_table(tmp_path / "faces.xlsx", _frames())
