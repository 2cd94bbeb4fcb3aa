from riflebird.main import run

run()
