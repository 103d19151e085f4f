import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for HackerBlog.
    Deployments override these via environment variables or a .env file.
    """
    # Database paths
    DB_DIR = os.getenv('HACKERBLOG_DB_DIR', os.path.join(os.getcwd(), 'databases'))
    BLOG_DB = os.getenv('HACKERBLOG_DB', os.path.join(DB_DIR, 'hackerblog.db'))

    # Table names
    POSTS_TABLE = 'posts'
    SUBSCRIBERS_TABLE = 'subscribers'
    LOGS_TABLE = 'app_logs'

    # Image uploads
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'uploads'))
    UPLOADS_URL_PREFIX = '/uploads'
    MAX_IMAGE_SIZE = int(os.getenv('MAX_IMAGE_SIZE', str(50 * 1024 * 1024)))
    ALLOWED_IMAGE_EXTENSIONS = {'jpeg', 'jpg', 'png', 'gif', 'webp'}
    ALLOWED_IMAGE_MIMETYPES = {'image/jpeg', 'image/jpg', 'image/png', 'image/gif', 'image/webp'}

    # Folder holding index.html for the front page
    INDEX_FOLDER = os.getenv('INDEX_FOLDER', os.getcwd())

    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

    # Port for local server
    PORT = int(os.getenv('PORT', '3000'))
    DEBUG = os.getenv('FLASK_DEBUG', '0') == '1'

    @classmethod
    def defaults(cls):
        """Settings HackerBlog copies into app.config when the app leaves them unset.
        BLOG_DB and MAX_CONTENT_LENGTH are derived from these afterwards."""
        return {
            'DB_DIR': cls.DB_DIR,
            'UPLOAD_FOLDER': cls.UPLOAD_FOLDER,
            'MAX_IMAGE_SIZE': cls.MAX_IMAGE_SIZE,
            'INDEX_FOLDER': cls.INDEX_FOLDER,
            'CORS_ORIGINS': cls.CORS_ORIGINS,
        }
