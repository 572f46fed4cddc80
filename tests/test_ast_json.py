import json

from grubby.ast_json import ast_from_obj, ast_to_obj
from grubby.interpreter import Interpreter
from grubby.parser import parse_program_source


SOURCE = """
later var total: Int
total = 0
val names = ['ada', 'bob']
fn greet(who: String, times: Int)
    for i = 1 to times
        println '{i}: hello {who}'
    end
end
foreach n in names
    if n == 'ada' then greet(n, 2) elseif n == 'bob' then total = total + 1 else println n end
end
while total < 3
    total = total + 1
end
println total == 3
println total
"""


def test_ast_json_round_trip_runs_identically():
    statements = parse_program_source(SOURCE)
    encoded = json.dumps(ast_to_obj(statements))
    decoded = ast_from_obj(json.loads(encoded))
    assert decoded == statements

    lines = []
    Interpreter(output=lines.append).run(decoded)
    assert lines == ['1: hello ada', '2: hello ada', 'true', '3']


def test_ast_json_shape():
    obj = ast_to_obj(parse_program_source('import lib\nval x = 1 + 2'))
    assert obj[0] == {'type': 'ImportStmt', 'name': 'lib'}
    assert obj[1]['type'] == 'VarDecl'
    assert obj[1]['is_mutable'] is False
    assert obj[1]['expr']['op'] == '+'
