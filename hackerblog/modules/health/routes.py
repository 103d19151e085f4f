"""
Health Routes
=============
"""

import os
import shutil

from flask import current_app, jsonify

from . import health_bp

ERROR_SPIKE_THRESHOLD = 10


def _get_disk_usage(path):
    """Get disk usage for the partition holding path."""
    try:
        usage = shutil.disk_usage(path)
        return {
            'total_gb': round(usage.total / (1024 ** 3), 1),
            'used_gb': round(usage.used / (1024 ** 3), 1),
            'free_gb': round(usage.free / (1024 ** 3), 1),
            'percent': round((usage.used / usage.total) * 100, 1),
        }
    except OSError as e:
        return {'total_gb': 0, 'used_gb': 0, 'free_gb': 0, 'percent': 0, 'error': str(e)}


def _get_image_consistency(posts):
    """Orphaned images and posts pointing at missing images"""
    try:
        orphans = posts.find_orphaned_artifacts()
        dangling = posts.find_dangling_references()
        return {
            'orphaned_images': len(orphans),
            'orphaned_sample': orphans[:10],
            'dangling_posts': dangling,
        }
    except Exception as e:
        return {'orphaned_images': 0, 'orphaned_sample': [], 'dangling_posts': [], 'error': str(e)}


def _compute_status(checks):
    """Compute overall status and issues list from the individual checks."""
    issues = []
    status = 'ok'

    if not checks['database']['ok']:
        issues.append({'type': 'database', 'message': 'Database unavailable'})
        status = 'critical'
    if not checks['uploads']['writable']:
        issues.append({'type': 'uploads', 'message': 'Upload folder is not writable'})
        status = 'critical'

    def warn(issue_type, message):
        nonlocal status
        issues.append({'type': issue_type, 'message': message})
        if status != 'critical':
            status = 'warning'

    disk_pct = checks['disk'].get('percent', 0)
    if disk_pct >= 90:
        issues.append({'type': 'disk_critical', 'message': f'Disk usage critical: {disk_pct}%'})
        status = 'critical'
    elif disk_pct >= 80:
        warn('disk_warning', f'Disk usage high: {disk_pct}%')

    images = checks['images']
    if images['orphaned_images']:
        warn('orphaned_images', f"{images['orphaned_images']} stored images are not referenced by any post")
    if images['dangling_posts']:
        warn('dangling_images', f"{len(images['dangling_posts'])} posts reference missing images")

    if checks['errors_last_hour'] > ERROR_SPIKE_THRESHOLD:
        warn('error_spike', f"{checks['errors_last_hour']} errors in the last hour")

    return status, issues


@health_bp.route('', methods=['GET'])
def health():
    """Health check; 503 when the database or upload folder is unusable"""
    blog = current_app.extensions['hackerblog']
    upload_folder = blog.images.upload_folder

    database_ok = blog.database.ping()
    checks = {
        'database': {'ok': database_ok},
        'uploads': {
            'path': upload_folder,
            'writable': os.path.isdir(upload_folder) and os.access(upload_folder, os.W_OK),
        },
        'disk': _get_disk_usage(upload_folder if os.path.isdir(upload_folder) else '/'),
        'images': _get_image_consistency(blog.posts) if database_ok else {
            'orphaned_images': 0, 'orphaned_sample': [], 'dangling_posts': [],
        },
        'errors_last_hour': blog.logger.error_count(hours=1) if database_ok else 0,
    }

    status, issues = _compute_status(checks)
    body = {'status': status, 'issues': issues, 'checks': checks}
    return jsonify(body), 503 if status == 'critical' else 200
