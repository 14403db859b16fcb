# doc_catalog/main.py

import click

from doc_catalog.cli.main import docs


@click.group(context_settings=dict(help_option_names=['-h', '--help']))
def main():
    """
    Document Catalog: a local catalog of document metadata.

    This is the main entry point for the application. It hands over to the
    'cli' command group, which loads the settings and configures logging.

    Example: python -m doc_catalog.main cli list --search budget
    """
    pass


main.add_command(docs, name='cli')

if __name__ == '__main__':
    main()
