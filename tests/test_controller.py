import pytest

from ecfan.config import ConfigManager
from ecfan.controller import FanController
from ecfan.ec import (
    ECAccessError,
    ECWriteError,
    KernelECAccess,
    PreparedECAccess,
    RegisterWrite,
    RegisterWriter,
)
from ecfan.registers import CPU_FAN_OFFSET, GPU_FAN_OFFSET

MANUAL = RegisterWrite(3, (0x11,))


@pytest.fixture
def controller(writer, access):
    return FanController(writer=writer, access=access)


@pytest.mark.parametrize(
    "argv,expected",
    [
        (("mode", "quiet"), [RegisterWrite(44, (0x00,))]),
        (("mode", "default"), [RegisterWrite(44, (0x01,))]),
        (("mode", "performance"), [RegisterWrite(44, (0x04,))]),
        (("auto",), [RegisterWrite(33, (0x10, 0x04))]),
        (("max",), [RegisterWrite(33, (0x20, 0x08))]),
        (("custom", 75, 50), [RegisterWrite(33, (0x30, 0x0C)), RegisterWrite(54, (0x4B,)), RegisterWrite(58, (0x32,))]),
    ],
)
def test_manual_enable_first_and_once(controller, access, recorded_writes, argv, expected):
    writes = controller.run(*argv)

    assert writes == [MANUAL] + expected
    assert recorded_writes == writes
    assert access.calls == 1


@pytest.mark.parametrize(
    "argv",
    [
        ("turbo",),
        ("mode",),
        ("mode", "loud"),
        ("mode", "quiet", "extra"),
        ("auto", "extra"),
        ("max", 1),
        ("custom", 75),
        ("custom", 75, 50, 25),
        ("custom", 101, 50),
        ("custom", 50, -5),
    ],
)
def test_invalid_commands_write_nothing(controller, access, ec_file, recorded_writes, argv):
    with pytest.raises(ValueError):
        controller.run(*argv)

    assert access.calls == 0
    assert recorded_writes == []
    assert not any(ec_file.read_bytes())


def test_access_failure_stops_before_writes(controller, access, recorded_writes):
    access.error = ECAccessError("ec_sys unavailable")

    with pytest.raises(ECAccessError):
        controller.run("max")
    assert recorded_writes == []


def test_write_failure_aborts_sequence(tmp_path, access, recorded_writes):
    controller = FanController(writer=None, access=access, config=ConfigManager())
    controller.writer.path = str(tmp_path / "missing")

    with pytest.raises(ECWriteError):
        controller.run("custom", 10, 20)
    assert recorded_writes == []



class GpuFailingWriter(RegisterWriter):
    """Fails the GPU speed write, recording every offset it is asked for."""

    def __init__(self, path):
        super().__init__(path)
        self.attempted = []

    def write_bytes(self, offset, *values):
        self.attempted.append(offset)
        if offset == GPU_FAN_OFFSET:
            raise ECWriteError(f"Unable to write {self.path} at 0x{offset:02X}")
        return super().write_bytes(offset, *values)


def test_write_failure_midway_stops_remaining_writes(ec_file, access, recorded_writes):
    writer = GpuFailingWriter(str(ec_file))
    controller = FanController(writer=writer, access=access)

    with pytest.raises(ECWriteError):
        controller.run("custom", 75, 50)

    assert writer.attempted == [3, 33, GPU_FAN_OFFSET]
    assert CPU_FAN_OFFSET not in writer.attempted
    assert recorded_writes == [MANUAL, RegisterWrite(33, (0x30, 0x0C))]
    data = ec_file.read_bytes()
    assert data[GPU_FAN_OFFSET] == 0 and data[CPU_FAN_OFFSET] == 0

def test_default_access_from_config(config_file, ec_file):
    config = ConfigManager(str(config_file(ec_io_path=str(ec_file))))
    controller = FanController(config=config)
    assert isinstance(controller.access, KernelECAccess)
    assert controller.writer.path == str(ec_file)


def test_prepared_access_from_config(config_file, ec_file):
    config = ConfigManager(str(config_file(ec_io_path=str(ec_file), prepare_access=False)))
    assert isinstance(FanController(config=config).access, PreparedECAccess)
