from simetry.iracing.flags import CameraState, DriverBlackFlags, GlobalFlags, StartFlags


def test_global_flag_values():
    assert GlobalFlags(0x0000_0001) is GlobalFlags.CHECKERED
    assert GlobalFlags(0x0000_0004) is GlobalFlags.GREEN
    assert GlobalFlags(0x0000_8000) is GlobalFlags.CAUTION_WAVING


def test_flag_groups_do_not_overlap():
    global_bits = 0
    for flag in GlobalFlags:
        global_bits |= flag.value
    black_bits = 0
    for flag in DriverBlackFlags:
        black_bits |= flag.value
    start_bits = 0
    for flag in StartFlags:
        start_bits |= flag.value
    assert int(GlobalFlags(global_bits)) == 0x0000_FFFF
    assert int(DriverBlackFlags(black_bits)) == 0x001F_0000
    assert int(StartFlags(start_bits)) == 0xF000_0000
    assert global_bits & black_bits == 0
    assert global_bits & start_bits == 0
    assert black_bits & start_bits == 0


def test_decode_combined_session_flags():
    raw = 0x0000_0004 | 0x0010_0000 | 0x8000_0000
    assert GlobalFlags(raw & 0x0000_FFFF) == GlobalFlags.GREEN
    assert DriverBlackFlags(raw & 0x00FF_0000) == DriverBlackFlags.REPAIR
    assert StartFlags(raw & 0xF000_0000) == StartFlags.GO
    assert not GlobalFlags.YELLOW & raw
    assert not StartFlags.READY & raw


def test_start_go_is_high_bit():
    assert StartFlags(0x8000_0000) is StartFlags.GO


def test_camera_state_combination():
    state = CameraState.CAM_TOOL_ACTIVE | CameraState.UI_HIDDEN
    assert int(state) == 0x0004 | 0x0008
    assert CameraState.UI_HIDDEN in state
    assert CameraState.IS_SCENIC_ACTIVE not in state
    assert CameraState(int(state)) == state