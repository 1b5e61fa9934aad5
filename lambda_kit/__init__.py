"""
lambda_kit
----------

Serverless Framework(serverless CLI) + AWS Lambda 용 배포/운영 CLI 패키지.
템플릿 초기화, deploy/remove/info/invoke/logs 위임, 그리고 배포된 함수에서
콘솔 명령을 직접 실행하는 `cli` 명령을 제공한다.
"""

__all__ = [
    "config",
    "serverless",
    "remote_invoke",
]
