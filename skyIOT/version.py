# -*- coding: utf-8 -*-
sdkVersion = '0.1.0'
