"""API service for HTTP client abstraction."""
import logging
import requests


class APIService:
    """HTTP client for the intake backend.

    Each call is a single attempt; failures surface to the caller.
    """

    def __init__(self, base_url='http://localhost:5000', timeout=60.0, session=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logging.getLogger(self.__class__.__name__)

    def _make_request(self, method, endpoint, **kwargs):
        url = f"{self.base_url}{endpoint}"
        kwargs.setdefault('timeout', self.timeout)
        self.logger.debug(f"{method} {url}")
        try:
            return self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Request failed: {method} {url}: {e}")
            raise

    def get(self, endpoint, **kwargs):
        return self._make_request('GET', endpoint, **kwargs)

    def post(self, endpoint, **kwargs):
        return self._make_request('POST', endpoint, **kwargs)

    def submit_participant(self, participant_json, files):
        """POST participantData plus image parts to /api/submit.

        Args:
            participant_json (str): JSON-encoded metadata
            files (dict): slot key -> (filename, bytes, content_type)
        """
        return self.post('/api/submit', data={'participantData': participant_json}, files=files)

    def get_participants(self):
        return self.get('/api/participants')

    def get_participant(self, participant_id):
        return self.get(f'/api/participants/{participant_id}')
