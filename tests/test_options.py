import pytest

from mk11unpack.options import (
    Options,
    UsageError,
    int_to_le_bytes,
    parse_args,
    swap_uint32,
    usage,
)


def test_file_name_only_uses_defaults():
    options = parse_args(["prog", "-f", "Init.XXX"])
    assert options == Options(file_name="Init.XXX", dll_folder="", load_psf=True)


def test_all_flags():
    options = parse_args(["prog", "-f", "a.xxx", "-p", "0", "-d", "dlls"])
    assert options.file_name == "a.xxx"
    assert options.load_psf is False
    assert options.dll_folder == "dlls"


def test_psf_flag_nonzero_is_true():
    assert parse_args(["prog", "-p", "1", "-f", "x"]).load_psf is True


def test_no_arguments_is_usage_error():
    with pytest.raises(UsageError):
        parse_args(["prog"])


def test_missing_file_flag_is_usage_error():
    with pytest.raises(UsageError):
        parse_args(["prog", "-d", "dlls"])


def test_flag_without_value_is_usage_error():
    with pytest.raises(UsageError):
        parse_args(["prog", "-f"])


def test_bad_psf_value_is_usage_error():
    with pytest.raises(UsageError):
        parse_args(["prog", "-f", "x", "-p", "yes"])


def test_usage_error_carries_usage_text():
    with pytest.raises(UsageError) as info:
        parse_args(["tool"])
    assert str(info.value) == "Incorrect Usage"
    assert info.value.usage == usage("tool")
    assert "-f file_name [-p] load_psf [-d] dll_folder" in info.value.usage


def test_swap_uint32_magic():
    assert swap_uint32(0x9E2A83C1) == 0xC1832A9E


@pytest.mark.parametrize("value", [0, 1, 0x12345678, 0xFFFFFFFF, 0x9E2A83C1])
def test_swap_uint32_is_involution(value):
    assert swap_uint32(swap_uint32(value)) == value


def test_int_to_le_bytes_magic():
    assert int_to_le_bytes(0x9E2A83C1, 4) == bytes([0xC1, 0x83, 0x2A, 0x9E])


@pytest.mark.parametrize("value", [0, 5, 0x20000, 2**63 + 7])
def test_int_to_le_bytes_round_trip(value):
    encoded = int_to_le_bytes(value, 8)
    assert len(encoded) == 8
    assert int.from_bytes(encoded, "little") == value