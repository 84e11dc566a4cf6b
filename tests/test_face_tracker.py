from facelandmarks.tracking import FaceTracker, TrackedDetection, TrackerState
from facelandmarks.types import Face


def _det(x: int, y: int, w: int, h: int, landmarks=()) -> TrackedDetection:
    return TrackedDetection(bbox=(x, y, w, h), landmarks=tuple(landmarks))


def test_small_motion_keeps_id_across_frames():
    tracker = FaceTracker()
    state = TrackerState()

    ids = []
    for step in range(6):
        faces = tracker.track(state, [_det(10 + 2 * step, 10 + step, 50, 50)])
        ids.append(faces[0].id)

    assert ids == [0] * 6
    assert state.next_id == 1


def test_non_overlapping_face_gets_fresh_id():
    tracker = FaceTracker()
    state = TrackerState()
    tracker.track(state, [_det(0, 0, 20, 20), _det(100, 100, 20, 20)])
    tracker.track(state, [_det(1, 1, 20, 20), _det(101, 100, 20, 20)])

    faces = tracker.track(state, [_det(1, 1, 20, 20), _det(300, 300, 20, 20)])

    assert faces[0].id == 0
    assert faces[1].id == 2, "IoU=0 detection must get an id above every id issued so far"
    assert state.next_id == 3


def test_disabled_tracking_allocates_new_ids_every_frame():
    tracker = FaceTracker()
    state = TrackerState()

    first = tracker.track(state, [_det(10, 10, 50, 50)], enabled=False)
    empty = tracker.track(state, [], enabled=False)
    second = tracker.track(state, [_det(10, 10, 50, 50), _det(80, 80, 10, 10)], enabled=False)

    assert [f.id for f in first] == [0]
    assert empty == []
    assert [f.id for f in second] == [1, 2]


def test_no_detections_discards_previous_faces():
    tracker = FaceTracker()
    state = TrackerState()
    tracker.track(state, [_det(10, 10, 50, 50)])

    assert tracker.track(state, []) == []
    assert state.last_faces == ()

    # The face comes back at the same spot but its old id is retired.
    faces = tracker.track(state, [_det(10, 10, 50, 50)])
    assert faces[0].id == 1


def test_greedy_matching_takes_best_pairs_first():
    tracker = FaceTracker()
    previous = [Face(id=0, bbox=(0, 0, 10, 10)), Face(id=1, bbox=(4, 0, 10, 10))]
    detections = [_det(3, 0, 10, 10), _det(1, 0, 10, 10)]

    assert tracker.assign(previous, detections) == {0: 1, 1: 0}


def test_equal_iou_prefers_closer_landmark_centroid():
    tracker = FaceTracker()
    previous = [
        Face(id=0, bbox=(10, 10, 40, 40), landmarks=((15, 15), (20, 20))),
        Face(id=1, bbox=(10, 10, 40, 40), landmarks=((40, 40), (45, 45))),
    ]
    detections = [_det(10, 10, 40, 40, landmarks=((41, 41), (44, 44)))]

    assert tracker.assign(previous, detections) == {0: 1}


def test_full_tie_goes_to_lowest_previous_id():
    tracker = FaceTracker()
    previous = [
        Face(id=5, bbox=(10, 10, 40, 40)),
        Face(id=3, bbox=(10, 10, 40, 40)),
    ]

    assert tracker.assign(previous, [_det(10, 10, 40, 40)]) == {0: 3}


def test_iou_must_be_strictly_above_threshold():
    previous = [Face(id=0, bbox=(0, 0, 10, 10))]
    detections = [_det(0, 0, 10, 5)]  # IoU == 0.5

    assert FaceTracker(iou_threshold=0.5).assign(previous, detections) == {}
    assert FaceTracker(iou_threshold=0.49).assign(previous, detections) == {0: 0}


def test_output_preserves_detection_order_and_landmarks():
    tracker = FaceTracker()
    state = TrackerState()
    landmarks = ((12, 20), (30, 21), (22, 35))
    tracker.track(state, [_det(10, 10, 30, 30)])

    faces = tracker.track(state, [_det(200, 200, 10, 10), _det(11, 10, 30, 30, landmarks)])

    assert [f.id for f in faces] == [1, 0]
    assert faces[1].landmarks == landmarks
    assert state.last_faces == tuple(faces)


def test_state_copy_is_independent():
    tracker = FaceTracker()
    state = TrackerState()
    tracker.track(state, [_det(10, 10, 30, 30)])

    copied = state.copy()
    tracker.track(copied, [_det(200, 200, 10, 10)])

    assert state.next_id == 1
    assert copied.next_id == 2
    assert state.last_faces[0].bbox == (10, 10, 30, 30)
