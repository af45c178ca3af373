from moonlet import parse


def test_program_7(interp, example, capsys):
    source = example('program_7.lua')
    ast = parse(source)
    interp.run(ast)
    out = capsys.readouterr().out.splitlines()
    assert out == ['2', '7', '3\t3\t4']
