"""Images blueprint: serves locally stored images (development only)."""
from flask import Blueprint, send_from_directory
from ..exceptions import NotFound
from ..services.image_storage import get_image_storage

bp = Blueprint('images', __name__, url_prefix='/api')


@bp.route('/images/<path:reference>', methods=['GET'])
def get_image(reference):
    storage = get_image_storage()
    if not storage.serves_locally or not storage.exists(reference):
        raise NotFound('Image not found')
    return send_from_directory(storage.root, reference)
