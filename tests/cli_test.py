# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Tests for the command line interface."""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from pytest_mock import MockerFixture

from genai_guide import cli


@pytest.fixture(autouse=True)
def cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, mocker: MockerFixture) -> None:
    """Run in an empty directory with a key set and logging left alone."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('GEMINI_API_KEY', 'test-key')
    monkeypatch.delenv('GOOGLE_API_KEY', raising=False)
    monkeypatch.delenv('MODEL', raising=False)
    mocker.patch('genai_guide.cli.setup_logging')


@pytest.fixture
def patched_client(mocker: MockerFixture, client: MagicMock) -> MagicMock:
    mocker.patch('genai_guide.cli.make_client', return_value=client)
    return client


def test_text(patched_client: MagicMock, make_response, capsys: pytest.CaptureFixture) -> None:
    patched_client.aio.models.generate_content.return_value = make_response('AI learns from data.')

    code = cli.main(['--model', 'gemini-2.5-pro', 'text', 'Explain AI', '--system', 'Be brief.'])

    assert code == 0
    captured = capsys.readouterr()
    assert 'AI learns from data.' in captured.out
    assert 'tokens: input=0 output=0' in captured.err
    kwargs = patched_client.aio.models.generate_content.call_args.kwargs
    assert kwargs['model'] == 'gemini-2.5-pro'
    assert kwargs['config'].system_instruction == 'Be brief.'


def test_stream(patched_client: MagicMock, make_response, stream_of, capsys: pytest.CaptureFixture) -> None:
    patched_client.aio.models.generate_content_stream.return_value = stream_of(
        [make_response('Once '), make_response('upon a time.')]
    )

    assert cli.main(['stream', 'Tell me a story']) == 0
    assert 'Once upon a time.' in capsys.readouterr().out


def test_api_error_prints_remediation(patched_client: MagicMock, capsys: pytest.CaptureFixture) -> None:
    patched_client.aio.models.generate_content.side_effect = genai_errors.ClientError(
        429, {'error': {'code': 429, 'message': 'Resource has been exhausted', 'status': 'RESOURCE_EXHAUSTED'}}
    )

    code = cli.main(['--max-retries', '0', 'text', 'hello'])

    err = capsys.readouterr().err
    assert code == 1
    assert 'RESOURCE_EXHAUSTED' in err
    assert 'Resource has been exhausted' in err
    assert 'rate limit' in err


def test_missing_api_key(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    monkeypatch.delenv('GEMINI_API_KEY')

    assert cli.main(['text', 'hello']) == 2
    assert 'GEMINI_API_KEY' in capsys.readouterr().err


def test_think_budget_and_level_are_exclusive(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(['think', 'why?', '--budget', '10', '--level', 'low'])
    assert exc_info.value.code == 2


def test_think_shows_thoughts(patched_client: MagicMock, make_response, capsys: pytest.CaptureFixture) -> None:
    patched_client.aio.models.generate_content.return_value = make_response(
        genai_types.Part(text='Considering primes', thought=True), '5117'
    )

    assert cli.main(['think', 'Sum the first 50 primes', '--level', 'low', '--show-thoughts']) == 0

    captured = capsys.readouterr()
    assert '5117' in captured.out
    assert 'Considering primes' in captured.err
    config = patched_client.aio.models.generate_content.call_args.kwargs['config'].thinking_config
    assert config.include_thoughts is True


def test_json_with_schema_file(
    patched_client: MagicMock, make_response, tmp_path: Path, capsys: pytest.CaptureFixture
) -> None:
    schema_path = tmp_path / 'schema.json'
    schema_path.write_text(json.dumps({'type': 'object', 'properties': {'name': {'type': 'string'}}}))
    patched_client.aio.models.generate_content.return_value = make_response('{"name": "Ada"}')

    assert cli.main(['json', 'Name a mathematician', '--schema', str(schema_path)]) == 0

    assert '"name": "Ada"' in capsys.readouterr().out
    config = patched_client.aio.models.generate_content.call_args.kwargs['config']
    assert config.response_schema.properties['name'].type == genai_types.Type.STRING


def test_tools(patched_client: MagicMock, make_response, capsys: pytest.CaptureFixture) -> None:
    call = genai_types.Part(function_call=genai_types.FunctionCall(name='getWeather', args={'location': 'Tokyo'}))
    patched_client.aio.models.generate_content.side_effect = [
        make_response(call),
        make_response('It is sunny in Tokyo.'),
    ]

    assert cli.main(['tools', "What's the weather in Tokyo?"]) == 0

    captured = capsys.readouterr()
    assert 'It is sunny in Tokyo.' in captured.out
    assert 'getWeather' in captured.err


def test_code(patched_client: MagicMock, make_response, capsys: pytest.CaptureFixture) -> None:
    patched_client.aio.models.generate_content.return_value = make_response(
        genai_types.Part(executable_code=genai_types.ExecutableCode(code='print(2)', language='PYTHON')),
        genai_types.Part(
            code_execution_result=genai_types.CodeExecutionResult(outcome='OUTCOME_OK', output='2\n'),
        ),
    )

    assert cli.main(['code', 'What is 1+1?']) == 0

    out = capsys.readouterr().out
    assert '=== CODE EXECUTION ===' in out
    assert 'print(2)' in out


def test_generate_image_saves_files(
    patched_client: MagicMock, make_response, tmp_path: Path, capsys: pytest.CaptureFixture
) -> None:
    image = genai_types.Part(inline_data=genai_types.Blob(data=b'png', mime_type='image/png'))
    patched_client.aio.models.generate_content.return_value = make_response(image)

    assert cli.main(['generate-image', 'A banana', '--out', str(tmp_path / 'out')]) == 0

    assert (tmp_path / 'out' / 'image-0.png').read_bytes() == b'png'


def test_image_reports_missing_file(patched_client: MagicMock, capsys: pytest.CaptureFixture) -> None:
    assert cli.main(['image', 'does-not-exist.png']) == 1


def test_chat(
    patched_client: MagicMock, make_response, stream_of, mocker: MockerFixture, capsys: pytest.CaptureFixture
) -> None:
    patched_client.aio.models.generate_content_stream.side_effect = [
        stream_of([make_response('Hi there!')]),
        stream_of([make_response('Fresh start.')]),
    ]
    mocker.patch('builtins.input', side_effect=['Hello', '/reset', '', 'Again', '/exit'])

    assert cli.main(['chat']) == 0

    out = capsys.readouterr().out
    assert 'Hi there!' in out
    assert 'Fresh start.' in out
    # After /reset the second request carries only the new user turn.
    contents = patched_client.aio.models.generate_content_stream.call_args_list[1].kwargs['contents']
    assert len(contents) == 1


def test_chat_ctrl_c_exits_130(patched_client: MagicMock, mocker: MockerFixture) -> None:
    """Ctrl-C at the prompt ends the session instead of hanging."""
    mocker.patch('builtins.input', side_effect=KeyboardInterrupt)

    assert cli.main(['chat']) == 130
    patched_client.aio.models.generate_content_stream.assert_not_awaited()


def test_chat_ctrl_d_exits_cleanly(patched_client: MagicMock, mocker: MockerFixture) -> None:
    mocker.patch('builtins.input', side_effect=EOFError)
    assert cli.main(['chat']) == 0


def test_chat_api_error_keeps_session_going(
    patched_client: MagicMock, make_response, stream_of, mocker: MockerFixture, capsys: pytest.CaptureFixture
) -> None:
    patched_client.aio.models.generate_content_stream.side_effect = [
        genai_errors.ServerError(500, {'error': {'code': 500, 'message': 'oops', 'status': 'INTERNAL'}}),
        stream_of([make_response('Back again.')]),
    ]
    mocker.patch('builtins.input', side_effect=['Hello', 'Hello again', '/exit'])

    assert cli.main(['--max-retries', '0', 'chat']) == 0

    captured = capsys.readouterr()
    assert 'INTERNAL' in captured.err
    assert 'Back again.' in captured.out


def test_think_invalid_budget_exits_1(patched_client: MagicMock, capsys: pytest.CaptureFixture) -> None:
    assert cli.main(['think', 'hi', '--budget', '-5']) == 1
    assert 'thinking budget' in capsys.readouterr().err
    patched_client.aio.models.generate_content.assert_not_awaited()


def test_json_malformed_schema_exits_1(
    patched_client: MagicMock, tmp_path: Path, capsys: pytest.CaptureFixture
) -> None:
    schema_path = tmp_path / 'schema.json'
    schema_path.write_text('{"type": "object",')

    assert cli.main(['json', 'hi', '--schema', str(schema_path)]) == 1
    assert 'error:' in capsys.readouterr().err
    patched_client.aio.models.generate_content.assert_not_awaited()
