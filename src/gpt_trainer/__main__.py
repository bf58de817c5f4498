"""Enable running gpt-trainer as a module: python -m gpt_trainer."""

from gpt_trainer.cli import main

if __name__ == "__main__":
    main()
