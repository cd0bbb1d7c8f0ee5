from bumptag.cli import cli

if __name__ == "__main__":
    cli(prog_name="bumptag")
