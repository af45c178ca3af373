from moonlet import parse


def test_program_12(interp, example, capsys):
    source = example('program_12.lua')
    ast = parse(source)
    interp.run(ast)
    out = capsys.readouterr().out.splitlines()
    assert out == ['5', '-2', '8\tnil']
