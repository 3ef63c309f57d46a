"""Application entry point for the DevToolkit account service"""
from devtoolkit.app import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=app.config['DEBUG'], host='0.0.0.0', port=5000)
