import sys
import logging
from quiz_server import QuizServer

args = [a for a in sys.argv[1:] if not a.startswith('--')]
log_level = (args[0:1] or ['ERROR'])[0].upper()
logging.basicConfig(level = log_level)

server = QuizServer('config.json')

if '--local' in sys.argv[1:]:
    server.run_local()
else:
    server.serve_forever()
