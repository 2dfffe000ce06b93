"""Backend settings loaded from the environment."""
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from shared.enums import DeploymentMode
from shared.validation import MAX_IMAGE_BYTES


class BackendSettings(BaseSettings):
    """Deployment configuration using Pydantic BaseSettings.

    Every value can be set with an ``INTAKE_`` prefixed environment variable,
    e.g. ``INTAKE_ENV=production`` or ``INTAKE_CLOUD_STORAGE_BUCKET=...``.
    """

    env: DeploymentMode = DeploymentMode.DEVELOPMENT
    database_url: str = 'sqlite+pysqlite:///intake.db'

    # Image storage; backend defaults to 'cloud' in production, 'local' otherwise
    storage_backend: Optional[str] = None
    upload_dir: Optional[str] = None
    max_image_bytes: int = MAX_IMAGE_BYTES

    # Object storage (Apache Libcloud)
    cloud_storage_provider: str = 's3'
    cloud_storage_access_key: Optional[str] = None
    cloud_storage_secret_key: Optional[str] = None
    cloud_storage_bucket: Optional[str] = None
    cloud_storage_region: str = 'us-east-1'

    model_config = SettingsConfigDict(env_prefix='INTAKE_', case_sensitive=False)

    @property
    def is_production(self):
        return self.env == DeploymentMode.PRODUCTION

    def resolved_storage_backend(self):
        if self.storage_backend:
            return self.storage_backend.lower()
        return 'cloud' if self.is_production else 'local'

    def resolved_upload_dir(self):
        if self.upload_dir:
            return self.upload_dir
        return '/tmp' if self.is_production else str(Path.cwd())

    def as_flask_config(self):
        """Map settings onto Flask config keys."""
        # Five photos plus the metadata blob
        max_request = self.max_image_bytes * 5 + 1024 * 1024
        return {
            'INTAKE_ENV': self.env.value,
            'SQLALCHEMY_DATABASE_URI': self.database_url,
            'SQLALCHEMY_TRACK_MODIFICATIONS': False,
            'STORAGE_BACKEND': self.resolved_storage_backend(),
            'UPLOAD_DIR': self.resolved_upload_dir(),
            'MAX_IMAGE_BYTES': self.max_image_bytes,
            'MAX_CONTENT_LENGTH': max_request,
            'CLOUD_STORAGE_PROVIDER': self.cloud_storage_provider,
            'CLOUD_STORAGE_ACCESS_KEY': self.cloud_storage_access_key,
            'CLOUD_STORAGE_SECRET_KEY': self.cloud_storage_secret_key,
            'CLOUD_STORAGE_BUCKET': self.cloud_storage_bucket,
            'CLOUD_STORAGE_REGION': self.cloud_storage_region,
        }
