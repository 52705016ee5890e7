from unittest import mock

from nfskit.utils import rand_uint32


def test_rand_uint32_in_range():
    values = [rand_uint32() for _ in range(200)]
    assert all(0 <= v < 2**32 for v in values)


def test_rand_uint32_varies():
    values = {rand_uint32() for _ in range(50)}
    assert len(values) > 1


def test_rand_uint32_is_big_endian():
    with mock.patch("os.urandom", return_value=b"\x01\x02\x03\x04"):
        assert rand_uint32() == 0x01020304


def test_rand_uint32_max():
    with mock.patch("os.urandom", return_value=b"\xff\xff\xff\xff"):
        assert rand_uint32() == 0xFFFFFFFF