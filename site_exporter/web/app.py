"""
Flask web application for the site exporter.

Provides a web UI and JSON API for starting, watching, cancelling and
downloading export jobs.
"""

from typing import Optional

from flask import Flask, Response, render_template, request, jsonify

from ..errors import DownloadInProgress, InvalidInput, JobNotFound
from ..jobs.models import JobOptions
from ..jobs.runner import JobManager
from ..utils.constants import ARCHIVE_FILENAME
from ..utils.log import get_logger


def create_app(manager: Optional[JobManager] = None):
    """
    Create and configure the Flask application.

    Args:
        manager: Job manager serving the API (a fresh one by default)
    """
    app = Flask(__name__,
                template_folder='templates')

    app.job_manager = manager or JobManager()
    logger = get_logger("web")

    @app.errorhandler(JobNotFound)
    def job_not_found(error):
        return jsonify({'error': 'Job not found', 'logs': ['Job not found'], 'done': True}), 404

    @app.errorhandler(DownloadInProgress)
    def download_in_progress(error):
        return jsonify({'error': str(error)}), 409

    @app.route('/')
    def index():
        """Render the main UI page."""
        return render_template('index.html')

    @app.route('/api/jobs', methods=['POST'])
    def start_job():
        """Start a new export job."""
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400

        url = str(data.get('url') or '').strip()
        try:
            options = JobOptions.from_request(data)
            job_id = app.job_manager.start_job(url, options)
        except InvalidInput as e:
            return jsonify({'error': str(e)}), 400

        return jsonify({
            'jobId': job_id,
            'message': 'Export job started',
            'status': app.job_manager.get_job(job_id).status.value
        })

    @app.route('/api/jobs')
    def list_jobs():
        """List all known jobs."""
        jobs = [job.to_dict(include_logs=False) for job in app.job_manager.list_jobs()]
        return jsonify({'jobs': jobs})

    @app.route('/api/jobs/<job_id>')
    def get_status(job_id):
        """Get the status and log of a job."""
        return jsonify(app.job_manager.get_job(job_id).to_dict())

    @app.route('/api/jobs/<job_id>/cancel', methods=['POST'])
    def cancel_job(job_id):
        """Request cancellation of a running job."""
        job = app.job_manager.cancel_job(job_id)
        return jsonify({'message': 'Cancellation requested', 'status': job.status.value})

    @app.route('/api/jobs/<job_id>', methods=['DELETE'])
    def discard_job(job_id):
        """Forget a job and delete its scratch files."""
        app.job_manager.discard_job(job_id)
        return jsonify({'message': 'Job discarded'})

    @app.route('/api/jobs/<job_id>/download')
    def download(job_id):
        """Stream the job's ZIP archive, following it while the crawl runs."""
        chunks = app.job_manager.stream_result(job_id)
        logger.info(f"Streaming archive for job {job_id}")
        return Response(
            chunks,
            mimetype='application/zip',
            headers={'Content-Disposition': f'attachment; filename={ARCHIVE_FILENAME}'}
        )

    return app


def run_app(host: str = '0.0.0.0', port: int = 5000, debug: bool = False):
    """Run the Flask web application."""
    app = create_app()
    app.run(host=host, port=port, debug=debug, threaded=True)


if __name__ == '__main__':
    run_app()
