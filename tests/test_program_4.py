from moonlet import parse


def test_program_4(interp, example, capsys):
    source = example('program_4.lua')
    ast = parse(source)
    interp.run(ast)
    out = capsys.readouterr().out.splitlines()
    assert out == ['720']
