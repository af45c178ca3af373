from moonlet import parse


def test_program_8(interp, example, capsys):
    source = example('program_8.lua')
    ast = parse(source)
    interp.run(ast)
    out = capsys.readouterr().out.splitlines()
    assert out == ['42']
