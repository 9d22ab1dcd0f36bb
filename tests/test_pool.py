import io

from pommikit.pool import Pool


def test_string_pool():
    sp = Pool(lambda: "test")
    v = sp.get()
    assert v == "test"
    sp.put(v)
    assert sp.get() == "test"


def test_buffer_pool():
    sp = Pool(io.BytesIO)
    v = sp.get()

    v.write(bytes([1]))
    assert v.getvalue()[0] == 1
    assert len(v.getvalue()) == 1

    v.seek(0)
    v.truncate(0)
    sp.put(v)

    assert len(v.getvalue()) == 0


def test_get_returns_put_object():
    sp = Pool(list)
    item = sp.get()
    item.append(1)
    sp.put(item)
    got = sp.get()
    assert got is item
    assert got == [1]


def test_factory_called_when_empty():
    calls = []

    def factory():
        calls.append(1)
        return object()

    sp = Pool(factory)
    a = sp.get()
    b = sp.get()
    assert a is not b
    assert len(calls) == 2


def test_put_and_reset_bytesio():
    sp = Pool(io.BytesIO)
    buf = sp.get()
    buf.write(b"hello")
    sp.put_and_reset(buf)
    got = sp.get()
    assert got is buf
    assert got.getvalue() == b""
    got.write(b"ab")
    assert got.getvalue() == b"ab"


def test_put_and_reset_stringio():
    sp = Pool(io.StringIO)
    buf = sp.get()
    buf.write("hello")
    sp.put_and_reset(buf)
    assert sp.get().getvalue() == ""


def test_put_and_reset_bytearray():
    sp = Pool(bytearray)
    buf = sp.get()
    buf.extend(b"data")
    sp.put_and_reset(buf)
    got = sp.get()
    assert got is buf
    assert len(got) == 0


def test_put_and_reset_leaves_other_objects():
    sp = Pool(list)
    item = [1, 2, 3]
    sp.put_and_reset(item)
    assert sp.get() == [1, 2, 3]