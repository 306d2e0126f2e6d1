from chip8vm import decode


def test_fields():
    ins = decode(0xD12F)
    assert ins.family == 0xD
    assert (ins.x, ins.y, ins.n) == (1, 2, 0xF)
    assert ins.nn == 0x2F
    assert ins.nnn == 0x12F
    assert ins.raw == 0xD12F
