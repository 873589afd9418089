#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Expertsys - Sistema especialista baseado em regras

Uso:
  python run.py validate knowledge/weather.kb
  python run.py info knowledge/weather.kb
  python run.py ask knowledge/weather.kb -t действие
  python run.py repl knowledge/weather.kb
"""

import sys
from pathlib import Path

# Adiciona src ao path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from expertsys.main import main

if __name__ == "__main__":
    main()
