from serverchan_relay.controller import create_app
from serverchan_relay.constants import DEBUG_MODE
from serverchan_relay.utils import configure_logging

configure_logging()
app = create_app()

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=app.config['RELAY'].listen_port, debug=DEBUG_MODE, use_reloader=False, threaded=True)
