import logging
import os

from flask import Flask
from flask_cors import CORS

from extensions import limiter
from decision_tables import git_bp, tables_bp

logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = int(os.environ.get('MAX_FILE_SIZE', 10 * 1024 * 1024))  # 10 MB upload limit

DEFAULT_ORIGINS = [
    'http://localhost:3000',
]
ALLOWED_ORIGINS = [o.strip() for o in os.environ.get('ALLOWED_ORIGINS', '').split(',') if o.strip()] or DEFAULT_ORIGINS

CORS(app, resources={r"/api/*": {"origins": ALLOWED_ORIGINS}})

limiter.init_app(app)

app.register_blueprint(tables_bp)
app.register_blueprint(git_bp)


@app.route('/api/health', methods=['GET'])
def health():
    return {'status': 'ok'}


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=False)
