"""
Lambda 진입점.

`lambda-kit cli <args>` 가 보낸 {"cli": "<args>"} 이벤트를 받아 셸 명령으로 실행하고
{"output": ..., "exitCode": ...} 형태로 결과를 돌려준다.
"""

import subprocess


def handle(event, context):  # noqa: ANN001, ARG001
    command = event.get("cli", "")
    if not command:
        return {"output": "", "exitCode": 0}

    proc = subprocess.run(  # noqa: S602
        command,
        shell=True,
        capture_output=True,
        text=True,
    )
    print(proc.stderr)
    return {"output": proc.stdout + proc.stderr, "exitCode": proc.returncode}
