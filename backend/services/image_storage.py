"""Image storage backends: local filesystem and Apache Libcloud object storage.

The backend is chosen once in the application factory from configuration and
stored on ``app.extensions['image_storage']``; request handlers never branch
on the deployment mode themselves.
"""

import logging
from pathlib import Path
from flask import current_app
from libcloud.common.types import LibcloudError
from libcloud.storage.providers import get_driver
from libcloud.storage.types import ContainerDoesNotExistError, ObjectDoesNotExistError, Provider
from shared.validation import Validator, ValidationError
from ..exceptions import StorageFailure


logger = logging.getLogger(__name__)


class ImageStorage:
    """Interface shared by all image storage backends.

    ``save`` returns the storage reference that is persisted as
    ``ParticipantImage.filename``; ``read`` and ``exists`` accept that reference.
    """

    name = 'base'
    serves_locally = False

    def save(self, key, data, content_type):
        raise NotImplementedError

    def read(self, reference):
        raise NotImplementedError

    def exists(self, reference):
        raise NotImplementedError


class LocalImageStorage(ImageStorage):
    """Stores images under ``<upload_dir>/uploads/images/<key>``."""

    name = 'local'
    serves_locally = True

    def __init__(self, upload_dir):
        self.root = Path(upload_dir) / 'uploads' / 'images'
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Local image storage initialized at {self.root}")

    def path_for(self, reference):
        try:
            Validator.validate_storage_key(reference)
        except ValidationError as e:
            raise StorageFailure(str(e)) from e
        return self.root / reference

    def save(self, key, data, content_type):
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to write image {key} to {path}: {e}")
            raise StorageFailure(f"Failed to store image {key}") from e
        logger.debug(f"Stored {len(data)} bytes at {path}")
        return key

    def read(self, reference):
        path = self.path_for(reference)
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageFailure(f"Failed to read image {reference}") from e

    def exists(self, reference):
        try:
            return self.path_for(reference).is_file()
        except StorageFailure:
            return False


class CloudImageStorage(ImageStorage):
    """Object storage through an Apache Libcloud driver.

    Objects are named ``<prefix>/<key>``; the prefixed name is the stored reference.
    """

    name = 'cloud'

    PROVIDER_MAP = {
        's3': Provider.S3,
        'gcs': Provider.GOOGLE_STORAGE,
        'azure': Provider.AZURE_BLOBS,
        'minio': Provider.MINIO,
    }

    def __init__(self, provider_name, access_key, secret_key, bucket_name, region='us-east-1', prefix='uploads'):
        if not all([access_key, secret_key, bucket_name]):
            raise ValueError("Cloud storage configuration incomplete. Check INTAKE_CLOUD_STORAGE_* environment variables.")

        self.provider_name = provider_name
        self.access_key = access_key
        self.secret_key = secret_key
        self.bucket_name = bucket_name
        self.region = region
        self.prefix = prefix.strip('/')

        self.driver = self._get_driver()
        self.container = self._get_container()
        logger.info(f"Cloud image storage initialized with provider: {self.provider_name}, bucket: {self.bucket_name}")

    def _get_driver(self):
        """Get the appropriate libcloud driver based on provider."""
        if self.provider_name not in self.PROVIDER_MAP:
            raise ValueError(f"Unsupported provider: {self.provider_name}")

        kwargs = {
            'key': self.access_key,
            'secret': self.secret_key,
        }
        if self.provider_name == 's3':
            kwargs['region'] = self.region

        return get_driver(self.PROVIDER_MAP[self.provider_name])(**kwargs)

    def _get_container(self):
        """Get or create the storage container/bucket."""
        try:
            return self.driver.get_container(container_name=self.bucket_name)
        except ContainerDoesNotExistError:
            logger.info(f"Creating container: {self.bucket_name}")
            return self.driver.create_container(container_name=self.bucket_name)

    def object_name_for(self, key):
        try:
            Validator.validate_storage_key(key)
        except ValidationError as e:
            raise StorageFailure(str(e)) from e
        return f"{self.prefix}/{key}" if self.prefix else key

    def save(self, key, data, content_type):
        object_name = self.object_name_for(key)
        logger.info(f"Uploading {len(data)} bytes to {object_name}")
        try:
            self.driver.upload_object_via_stream(
                iterator=iter([data]),
                container=self.container,
                object_name=object_name,
                extra={'content_type': content_type},
            )
        except (LibcloudError, OSError) as e:
            logger.error(f"Failed to upload {object_name}: {e}")
            raise StorageFailure(f"Failed to store image {key}") from e
        return object_name

    def read(self, reference):
        try:
            obj = self.driver.get_object(self.container.name, reference)
            return b''.join(self.driver.download_object_as_stream(obj))
        except (LibcloudError, OSError) as e:
            raise StorageFailure(f"Failed to read image {reference}") from e

    def exists(self, reference):
        try:
            self.driver.get_object(self.container.name, reference)
            return True
        except ObjectDoesNotExistError:
            return False


def build_image_storage(config):
    """Create the image storage backend selected by configuration."""
    injected = config.get('IMAGE_STORAGE')
    if injected is not None:
        return injected

    backend = config.get('STORAGE_BACKEND', 'local')
    if backend == 'local':
        return LocalImageStorage(config['UPLOAD_DIR'])
    if backend == 'cloud':
        return CloudImageStorage(
            provider_name=config.get('CLOUD_STORAGE_PROVIDER', 's3'),
            access_key=config.get('CLOUD_STORAGE_ACCESS_KEY'),
            secret_key=config.get('CLOUD_STORAGE_SECRET_KEY'),
            bucket_name=config.get('CLOUD_STORAGE_BUCKET'),
            region=config.get('CLOUD_STORAGE_REGION', 'us-east-1'),
        )
    raise ValueError(f"Unknown storage backend: {backend}")


def get_image_storage():
    """Return the storage backend configured for the current app."""
    return current_app.extensions['image_storage']
