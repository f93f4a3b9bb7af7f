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

"""Code execution: the model writes Python and runs it server-side.

Key Concepts::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ Meaning                                        │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Executable code     │ The code the model wrote (``executable_code``).│
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Execution result    │ Outcome and stdout of running it in the        │
    │                     │ service's sandbox (``code_execution_result``). │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Text                │ The model's explanation around the code.       │
    └─────────────────────┴────────────────────────────────────────────────┘
"""

from google import genai
from google.genai import types as genai_types

from genai_guide.constants import DEFAULT_MODEL
from genai_guide.generate import enum_value, generate_content, response_parts, usage_from_response
from genai_guide.retry import RetryPolicy
from genai_guide.types import CodeExecutionResult, CodeStep

DEFAULT_CODE_TASK = 'What is the sum of the first 50 prime numbers? Generate and run code for the calculation.'


def steps_from_parts(parts: list[genai_types.Part]) -> tuple[list[CodeStep], str]:
    """Pair each ``executable_code`` part with the result that follows it.

    Returns:
        The code steps and the concatenated explanation text.
    """
    steps: list[CodeStep] = []
    text: list[str] = []
    for part in parts:
        if part.executable_code is not None:
            steps.append(
                CodeStep(
                    language=enum_value(part.executable_code.language) or 'PYTHON',
                    code=part.executable_code.code or '',
                )
            )
        elif part.code_execution_result is not None:
            result = part.code_execution_result
            if steps and steps[-1].outcome is None:
                step = steps[-1]
            else:
                # Result without preceding code; keep it rather than drop it.
                step = CodeStep(code='')
                steps.append(step)
            step.outcome = enum_value(result.outcome)
            step.output = result.output or ''
        elif part.text and not part.thought:
            text.append(part.text)
    return steps, ''.join(text)


async def execute_code(
    client: genai.Client,
    task: str = DEFAULT_CODE_TASK,
    *,
    model: str = DEFAULT_MODEL,
    policy: RetryPolicy | None = None,
) -> CodeExecutionResult:
    """Have the model solve ``task`` by writing and running code."""
    config = genai_types.GenerateContentConfig(
        tools=[genai_types.Tool(code_execution=genai_types.ToolCodeExecution())],
    )
    response = await generate_content(client, model=model, contents=task, config=config, policy=policy)
    steps, text = steps_from_parts(response_parts(response))
    return CodeExecutionResult(text=text, steps=steps, usage=usage_from_response(response))


def format_code_execution(result: CodeExecutionResult) -> str:
    """Render the steps and explanation for a terminal."""
    lines = ['=== CODE EXECUTION ===']
    for step in result.steps:
        if step.code:
            lang = step.language.lower()
            lines.append(f'```{lang}\n{step.code.rstrip()}\n```')
        if step.outcome is not None:
            lines.append(f'Status: {step.outcome}')
            lines.append('Output:')
            output = (step.output or '').rstrip()
            if not output:
                lines.append('  <no output>')
            else:
                lines.extend(f'  {line}' for line in output.splitlines())
    if result.text.strip():
        lines.append(f'\nExplanation:\n{result.text.strip()}')
    return '\n'.join(lines)
