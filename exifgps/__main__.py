from exifgps.cli.base import cli

if __name__ == "__main__":
    cli()
