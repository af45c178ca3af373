from moonlet import parse


def test_program_10(interp, example, capsys):
    source = example('program_10.lua')
    ast = parse(source)
    interp.run(ast)
    out = capsys.readouterr().out.splitlines()
    assert out == ['3\t4\t25', 'true\tfalse']
