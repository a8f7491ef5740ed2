from repo_snapshot.cli.app import app

if __name__ == "__main__":
    app()
