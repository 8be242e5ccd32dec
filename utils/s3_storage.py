"""S3 storage for uploaded 3D model files.

- models/{file_name}  (metadata: originalName, size, uploadedAt)
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple
from urllib.parse import quote, unquote

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


class S3ModelStorage:
    """S3에 3D 모델 파일 저장"""

    def __init__(
        self,
        bucket_name: str,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        region: str = "ap-northeast-2",
        endpoint_url: Optional[str] = None,
        prefix: str = "models/",
    ) -> None:
        self.bucket_name = bucket_name
        self.prefix = prefix
        self.s3_client = boto3.client(
            "s3",
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            region_name=region,
            endpoint_url=endpoint_url,
        )

    def _key(self, file_name: str) -> str:
        return f"{self.prefix}{file_name}"

    def put(self, file_name: str, data: bytes, metadata: Dict[str, str]) -> str:
        """파일을 업로드하고 S3 키를 반환"""
        key = self._key(file_name)
        # S3 메타데이터는 ASCII만 허용되므로 값은 URL 인코딩해서 저장
        self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=data,
            ContentType="application/octet-stream",
            Metadata={k: quote(str(v)) for k, v in metadata.items()},
        )
        return key

    def get(self, file_name: str) -> Optional[Tuple[bytes, Dict[str, str]]]:
        """파일 내용과 메타데이터를 반환, 없으면 None"""
        try:
            obj = self.s3_client.get_object(Bucket=self.bucket_name, Key=self._key(file_name))
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in _MISSING_CODES:
                return None
            raise
        # boto3는 메타데이터 키를 소문자로 돌려준다
        metadata = {k.lower(): unquote(v) for k, v in (obj.get("Metadata") or {}).items()}
        return obj["Body"].read(), metadata
