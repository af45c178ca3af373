from moonlet import parse


def test_program_5(interp, example, capsys):
    source = example('program_5.lua')
    ast = parse(source)
    interp.run(ast)
    out = capsys.readouterr().out.splitlines()
    assert out == ['2']
