"""HTTP client for resumable uploads to the upload server."""

import time
import uuid
from pathlib import Path
from typing import Optional

import httpx

from common.content_range import format_content_range
from common.logging_config import get_logger
from cli.config import Config
from cli.utils import end_progress, format_file_size, format_progress, resume_key, write_progress

logger = get_logger(__name__)


class UploadAborted(Exception):
    """Raised when an upload cannot continue; the message is shown to the user."""
    pass


def generate_file_id() -> str:
    """
    Generate a new upload identifier.

    Returns:
        Identifier in format: file-{epoch_millis}-{6 hex chars}
    """
    return f"file-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


class UploadClient:
    """HTTP client for the upload server with retry logic and resumable uploads."""

    def __init__(self, config: Config):
        """
        Initialize upload client.

        Args:
            config: Configuration instance
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout()
        )
        self.request_id = None
        logger.info(f"Initialized UploadClient [base_url={config.get_base_url()}]")

    def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic on 5xx errors and network failures.

        Args:
            method: HTTP method (GET, POST, ...)
            endpoint: API endpoint path
            max_retries: Max retry attempts (uses config default if None)
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object

        Raises:
            ConnectionError: If max retries exceeded or connection fails
        """
        retry_config = self.config.get_retry_config()
        max_retries = max_retries if max_retries is not None else retry_config['max_retries']
        backoff = retry_config['retry_backoff_multiplier']

        last_exception = None

        self.request_id = str(uuid.uuid4())
        kwargs['headers'] = dict(kwargs.get('headers') or {})
        kwargs['headers']['X-Request-ID'] = self.request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, **kwargs)

                logger.debug(
                    f"Response received: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                )

                if 400 <= response.status_code < 500:
                    logger.warning(
                        f"Client error: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                    )
                    return response

                if response.status_code >= 500 and attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} status={response.status_code}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue

                return response

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue
                logger.error(
                    f"Network error (max retries exceeded): {method} {endpoint} error={e} [request_id={self.request_id}]"
                )

        if isinstance(last_exception, httpx.TimeoutException):
            raise ConnectionError("Request timed out. Server may be overloaded.")
        if isinstance(last_exception, httpx.ConnectError):
            raise ConnectionError("Cannot connect to upload server. Is it running?")
        raise ConnectionError("Max retries exceeded")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map HTTP errors to user-friendly messages.

        Args:
            response: HTTP response object

        Returns:
            User-friendly error message
        """
        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except ValueError:
            detail = response.text if response.text else 'Unknown error'
            code = 'UNKNOWN'

        error_messages = {
            'INVALID_TOKEN': 'Not authenticated. Please run: login <username> <password>',
            'INVALID_CREDENTIALS': 'Invalid username or password.',
            'NOT_FOUND': 'Upload not found on server.',
            'NOT_INITIALIZED': 'Upload was not initialized on the server.',
            'ALREADY_INITIALIZED': 'An upload with this ID already exists.',
            'SIZE_MISMATCH': 'File size differs from the size declared when the upload started.',
            'RANGE_NOT_SATISFIABLE': 'Requested range is beyond the end of the uploaded data.',
            'STORAGE_ERROR': 'Server storage failure. Please try again later.',
        }

        if code in error_messages:
            return error_messages[code]

        if code == 'INVALID_ARGUMENT':
            return f"Invalid request: {detail}"

        status_messages = {
            400: 'Bad request',
            401: 'Not authenticated',
            404: 'Not found',
            409: 'Conflict',
            416: 'Range not satisfiable',
            500: 'Server error',
            503: 'Service unavailable',
        }

        message = status_messages.get(response.status_code, detail)
        return f"{message} (Code: {code})" if code != 'UNKNOWN' else message

    def _get_auth_header(self) -> dict:
        """
        Get Authorization header with the bearer token.

        Raises:
            ValueError: If no token is configured
        """
        token = self.config.get_token()
        if not token:
            raise ValueError("Not logged in. Please run: login <username> <password>")
        return {'Authorization': f'Bearer {token}'}

    def login(self, username: str, password: str) -> str:
        """
        Login and store the bearer token.

        Args:
            username: Username
            password: Password

        Returns:
            Success or error message
        """
        logger.info(f"Attempting to login user: {username}")
        try:
            response = self._request_with_retry(
                'POST',
                '/login',
                data={'username': username, 'password': password}
            )
        except ConnectionError as e:
            logger.error(f"Connection error during login: {e}")
            return f"Error: {e}"

        if response.status_code == 200:
            self.config.set_token(response.json()['access_token'])
            logger.info(f"Login successful for user: {username}")
            return "Login successful!\nToken saved to config."

        logger.warning(f"Login failed for user: {username} status={response.status_code}")
        return f"Login failed: {self._format_error(response)}"

    def status(self, file_id: str) -> str:
        """
        Show the server-side progress of an upload.

        Returns:
            Formatted session details or error message
        """
        try:
            response = self._request_with_retry('GET', f'/status/{file_id}')
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Status failed: {self._format_error(response)}"

        data = response.json()
        return (
            f"Upload {data['file_id']}: {data['status']}\n"
            f"  Received: {format_progress(data['received_bytes'], data['total_bytes'])}\n"
            f"  Next expected byte: {data['next_expected_byte']}\n"
            f"  Last updated: {data['last_updated']}"
        )

    def upload(self, file_path: str, file_id: Optional[str] = None) -> str:
        """
        Upload a file in chunks, resuming a previous attempt when possible.

        The file_id used for a path is remembered in the config until the
        upload completes, so running the same command again continues from
        the server's next expected byte.

        Args:
            file_path: Local file to upload
            file_id: Identifier to use (defaults to the saved one or a new one)

        Returns:
            Success or error message
        """
        try:
            headers = self._get_auth_header()
        except ValueError as e:
            return f"Error: {e}"

        path = Path(file_path).expanduser()
        if not path.exists():
            return f"Error: File not found: {file_path}"
        if not path.is_file():
            return f"Error: Not a file: {file_path}"

        file_size = path.stat().st_size
        if file_size == 0:
            return f"Error: File is empty: {file_path}"

        key = resume_key(path)
        file_id = file_id or self.config.get_saved_upload(key) or generate_file_id()

        try:
            offset = self._prepare_upload(file_id, file_size, headers)
            self.config.save_upload(key, file_id)
            self._send_chunks(path, file_id, file_size, offset, headers)
        except UploadAborted as e:
            return f"Upload of {path.name} stopped: {e}"
        except ConnectionError as e:
            logger.error(f"Connection error during upload of {file_id}: {e}")
            return f"Error: {e}\nRun 'upload {file_path}' again to resume."

        self.config.forget_upload(key)
        logger.info(f"Upload complete: {file_id} ({file_size} bytes)")
        return f"Uploaded: {path.name} (ID: {file_id}, Size: {format_file_size(file_size)})"

    def _prepare_upload(self, file_id: str, file_size: int, headers: dict) -> int:
        """
        Find where to start sending, initializing the upload if the server doesn't know it.

        Returns:
            Byte offset of the first chunk to send
        """
        response = self._request_with_retry('GET', f'/status/{file_id}')

        if response.status_code == 200:
            data = response.json()
            if data['total_bytes'] != file_size:
                raise UploadAborted(
                    f"server has upload {file_id} with {data['total_bytes']} bytes but the file has {file_size}"
                )
            logger.info(f"Resuming upload {file_id} from byte {data['next_expected_byte']}")
            return data['next_expected_byte']

        if response.status_code != 404:
            raise UploadAborted(self._format_error(response))

        response = self._request_with_retry(
            'POST',
            '/init_upload',
            params={'file_id': file_id, 'total_size': file_size},
            headers=headers,
        )
        if response.status_code != 200:
            raise UploadAborted(self._format_error(response))

        logger.info(f"Initialized upload {file_id} ({file_size} bytes)")
        return 0

    def _send_chunks(self, path: Path, file_id: str, file_size: int, offset: int, headers: dict) -> None:
        chunk_size = self.config.get_chunk_size()
        start = offset

        with open(path, 'rb') as f:
            while start < file_size:
                f.seek(start)
                data = f.read(min(chunk_size, file_size - start))
                if not data:
                    raise UploadAborted(f"file shrank to {start} bytes while uploading")
                end = start + len(data) - 1

                chunk_headers = dict(headers)
                chunk_headers['Content-Range'] = format_content_range(start, end, file_size)

                response = self._request_with_retry(
                    'POST',
                    '/upload_chunk',
                    params={'file_id': file_id},
                    headers=chunk_headers,
                    files={'chunk': (path.name, data, 'application/octet-stream')},
                )

                if response.status_code != 200:
                    end_progress()
                    raise UploadAborted(
                        f"{self._format_error(response)} (at byte {start}). "
                        f"Run 'upload {path}' again to resume."
                    )

                start = max(response.json()['next_expected_byte'], end + 1)
                write_progress(f"Uploading {path.name}", start, file_size)

        end_progress()

    def download(
        self,
        file_id: str,
        output_path: Optional[str] = None,
        byte_range: Optional[str] = None,
    ) -> str:
        """
        Download an upload's bytes to a local file.

        Args:
            file_id: Upload identifier
            output_path: Destination file (defaults to ./<file_id>)
            byte_range: Optional "start-end" range to fetch

        Returns:
            Success or error message
        """
        output_file = Path(output_path).expanduser() if output_path else Path.cwd() / file_id
        if output_file.is_dir():
            output_file = output_file / file_id

        headers = {}
        if byte_range:
            headers['Range'] = f"bytes={byte_range}"

        logger.info(f"Downloading {file_id} to {output_file} [range={byte_range or 'full'}]")
        try:
            with self.session.stream('GET', f'/download/{file_id}', headers=headers) as response:
                if response.status_code not in (200, 206):
                    response.read()
                    return f"Download failed: {self._format_error(response)}"

                output_file.parent.mkdir(parents=True, exist_ok=True)
                written = 0
                with open(output_file, 'wb') as f:
                    for piece in response.iter_bytes():
                        f.write(piece)
                        written += len(piece)
                content_range = response.headers.get('Content-Range')
        except (httpx.ConnectError, httpx.TimeoutException) as e:
            logger.error(f"Network error during download of {file_id}: {e}")
            return "Error: Cannot connect to upload server. Is it running?"

        result = f"Downloaded: {file_id} -> {output_file} ({format_file_size(written)})"
        if content_range:
            result += f"\n  Content-Range: {content_range}"
        return result

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()
