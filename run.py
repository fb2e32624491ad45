# run.py
import os
from certchain.app import create_app

# Starts the Flask development server that backs the certificate API on port 3001,
# the address the API client expects by default.

if __name__ == "__main__":
    os.environ.setdefault('FLASK_APP', 'certchain.app')

    app = create_app()
    port = int(os.environ.get('PORT', 3001))

    print("="*60)
    print(f">>> Starting CertChain API on http://0.0.0.0:{port}/api")
    print("="*60)

    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=port)
